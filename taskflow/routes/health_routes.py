import logging
import time

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError

from taskflow.auth.dependencies import get_stores
from taskflow.repositories.factory import Stores

router = APIRouter(tags=['health'])

logger = logging.getLogger(__name__)

APPLICATION_NAME = 'taskflow-backend'


def _timestamp_millis() -> int:
    return int(time.time() * 1000)


def check_storage_health(stores: Stores) -> dict:
    try:
        details = stores.health_check()
    except (SQLAlchemyError, RedisError) as exc:
        logger.exception('Storage health check failed for %s backend.', stores.backend)
        return {
            'status': 'DOWN',
            'backend': stores.backend,
            'connection': 'failed',
            'error': str(exc),
        }

    logger.info('Storage health check successful - %s %s', details.get('database'), details.get('version'))
    return {'status': 'UP', 'backend': stores.backend, 'connection': 'valid', **details}


@router.get('/ping')
def ping():
    return {'status': 'UP', 'message': 'Service is running', 'timestamp': str(_timestamp_millis())}


@router.get('/database')
def database_health(stores: Stores = Depends(get_stores)):
    health = check_storage_health(stores)
    if health['status'] == 'DOWN':
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=health)
    return health


@router.get('/status')
def system_status(stores: Stores = Depends(get_stores)):
    health = check_storage_health(stores)
    connected = health['status'] == 'UP'
    return {
        'application': APPLICATION_NAME,
        'timestamp': _timestamp_millis(),
        'status': 'UP' if connected else 'DEGRADED',
        'database': health,
        'database_connected': connected,
    }
