"""
Process-wide lock for writes to shared voting state

Votes, the per-period statistics row and the active-period flag are all
written under vote_lock. It is re-entrant: the vote path refreshes
statistics while already holding it.
"""
import threading

vote_lock = threading.RLock()
