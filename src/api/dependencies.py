from fastapi import Request

from port.user_repository import UserRepository
from services.token_service import TokenIssuer
from utils.config import Settings


def build_user_repository(settings: Settings) -> UserRepository:
    """Create the credential store selected by ``DATABASE_URL``.

    ``mongodb://`` and ``mongodb+srv://`` URLs select MongoDB; anything else
    is handed to SQLAlchemy.
    """
    if settings.uses_mongodb:
        from adapter.mongodb.connection import create_mongodb_client
        from adapter.mongodb.user_repository import MongoUserRepository

        client = create_mongodb_client(settings.database_url)
        return MongoUserRepository(client[settings.database_name], client=client)

    from adapter.sql.connection import create_engine_from_url
    from adapter.sql.user_repository import SqlUserRepository

    return SqlUserRepository(create_engine_from_url(settings.database_url, echo=settings.database_echo))


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_user_repo(request: Request) -> UserRepository:
    return request.app.state.user_repo


def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.token_issuer
