from database.repositories.base import BaseRepository
from database.repositories.party import PartyRepository
from database.repositories.matrix import MatrixRepository
from database.repositories.match import MatchRepository
from database.repositories.stage import StageRepository
from database.repositories.application import ApplicationRepository
from database.repositories.notification import NotificationRepository

__all__ = [
    'BaseRepository',
    'PartyRepository',
    'MatrixRepository',
    'MatchRepository',
    'StageRepository',
    'ApplicationRepository',
    'NotificationRepository',
]
