# module cologne_api.app
from cologne_api.app_setup.factory import create_app

# App globale
app = create_app()
