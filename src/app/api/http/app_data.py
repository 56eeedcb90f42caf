from dataclasses import dataclass

from src.app.core.services import DbSessionService, ImageStore


@dataclass
class ApplicationDependencies:
    database_service: DbSessionService
    image_store: ImageStore
