import threading
from contextlib import contextmanager, ExitStack


class EntityLocks:
    """One re-entrant lock per (kind, id), so writes to the same borrower or
    title are serialized while unrelated entities proceed in parallel.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks = {}

    def lock_for(self, kind, ident):
        key = (kind, ident)
        with self._guard:
            if key not in self._locks:
                self._locks[key] = threading.RLock()
            return self._locks[key]

    @contextmanager
    def hold(self, *keys):
        """Acquire every (kind, id) lock, always in sorted order."""
        with ExitStack() as stack:
            for kind, ident in sorted(set(keys), key=lambda k: (k[0], str(k[1]))):
                stack.enter_context(self.lock_for(kind, ident))
            yield


LOCKS = EntityLocks()
