from src.modules.broadcaster import Broadcaster
from src.modules.database import Database
from src.modules.logging_helper import LoggingHelper
from src.modules.todo_store import TodoStoreExtension


def init_extensions(app):
    """Initialize all extensions with the application.

    Each app gets its own instances so no store state is shared between apps.
    """
    # Initialise in a specific order to handle dependencies
    LoggingHelper(app)
    Database(app)  # Database must come early
    Broadcaster(app)
    TodoStoreExtension(app)  # Depends on database and broadcaster
