from app import db  # noqa: F401 - imported for model imports

from .admin_action import AdminAction
from .contest import Contest
from .entry import Entry
from .matchup import Matchup
from .pick import Pick

__all__ = [
    "Contest",
    "Entry",
    "Matchup",
    "Pick",
    "AdminAction",
]
