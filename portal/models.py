"""
Portal Models Registry

Imports the models of the logical submodules (users, programs) so that they
are registered with Django's ORM under the single ``portal`` app label.
"""

# Import all user-related models for registration with Django ORM
from .users.models import *  # noqa: F401,F403

# Import all program-related models for registration with Django ORM
from .programs.models import *  # noqa: F401,F403
