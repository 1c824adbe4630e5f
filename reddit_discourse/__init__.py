from .config import Settings, load_settings
from .pseudonymize import hash_author, pseudonymize_authors
from .reply_tree import CommentPath, annotate_paths, reconstruct_thread, reconstruct_threads
from .tables import load_comments, write_table

__version__ = "0.1.0"

__all__ = [
    'Settings',
    'load_settings',
    'hash_author',
    'pseudonymize_authors',
    'CommentPath',
    'annotate_paths',
    'reconstruct_thread',
    'reconstruct_threads',
    'load_comments',
    'write_table',
]
