"""Storage singleton shared by the API and the service layer."""
from models.db_storage import DBStorage

storage = DBStorage()
storage.reload()
