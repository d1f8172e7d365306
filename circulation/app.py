#!/usr/bin/env python

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from circulation.routes import api
from circulation.configs import OPTIONS, ALLOWED_ORIGINS
from circulation import __version__ as VERSION

app = FastAPI(
    title="Circulation API",
    description="Circulation: loans, renewals, returns, fines and reservations for the college library",
    version=VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api.router, prefix="/v1/api")

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("circulation.app:app", **OPTIONS)
