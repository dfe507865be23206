"""
Caption Scout

Daily quota-budgeted discovery of YouTube videos with human-authored
captions in every required language. Accepted video ids are appended
to a ledger file; the search cursor is persisted so each day resumes
where the previous one stopped.
"""

__version__ = "0.1.0"
