# models/__init__.py
# Model registry

from .user import User
from .group import Group
from .presentation_slot import PresentationSlot
from .project import Project
from .score import Score
from .judging_status import JudgingStatus
