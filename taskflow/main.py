import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError

from taskflow.core import config
from taskflow.core.container import build_container
from taskflow.core.errors import TaskflowError
from taskflow.routes import auth_routes, health_routes, todo_routes

LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'

app = FastAPI(title='TaskFlow API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOWED_ORIGINS,
    allow_credentials=config.CORS_ALLOW_CREDENTIALS,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(level=config.LOG_LEVEL, format=LOG_FORMAT)


@app.on_event('startup')
def initialize_container() -> None:
    configure_logging()
    config.validate_runtime_config()
    try:
        app.state.container = build_container()
    except (SQLAlchemyError, RedisError):
        logger.exception('Storage initialization failed. Check STORAGE_BACKEND, DATABASE_URL and REDIS_URL.')
        raise


@app.exception_handler(TaskflowError)
async def taskflow_error_handler(request: Request, exc: TaskflowError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={'detail': exc.detail})


@app.get('/')
def root():
    return {'status': 'TaskFlow API Running'}


app.include_router(auth_routes.router, prefix='/api/auth')
app.include_router(todo_routes.router, prefix='/api/todos')
app.include_router(health_routes.router, prefix='/api/health')


def serve() -> None:
    uvicorn.run('taskflow.main:app', host=config.SERVER_HOST, port=config.SERVER_PORT)
