from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from taskflow.auth.dependencies import get_current_username, get_todo_service
from taskflow.models.todo import Todo
from taskflow.services.todo_service import TodoService

router = APIRouter(tags=['todos'])


class TodoRequest(BaseModel):
    title: str
    description: str | None = None


@router.post('', response_model=Todo)
def create_todo(
    data: TodoRequest,
    username: str = Depends(get_current_username),
    todo_service: TodoService = Depends(get_todo_service),
):
    return todo_service.create_todo(username, data.title, data.description)


@router.get('', response_model=list[Todo])
def list_todos(
    username: str = Depends(get_current_username),
    todo_service: TodoService = Depends(get_todo_service),
):
    return todo_service.get_all_todos(username)


@router.get('/{todo_id}', response_model=Todo)
def get_todo(
    todo_id: str,
    username: str = Depends(get_current_username),
    todo_service: TodoService = Depends(get_todo_service),
):
    return todo_service.get_todo_by_id(username, todo_id)


@router.put('/{todo_id}', response_model=Todo)
def update_todo(
    todo_id: str,
    data: TodoRequest,
    username: str = Depends(get_current_username),
    todo_service: TodoService = Depends(get_todo_service),
):
    return todo_service.update_todo(username, todo_id, data.title, data.description)


@router.patch('/{todo_id}/toggle', response_model=Todo)
def toggle_todo(
    todo_id: str,
    username: str = Depends(get_current_username),
    todo_service: TodoService = Depends(get_todo_service),
):
    return todo_service.toggle_todo(username, todo_id)


@router.delete('/{todo_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_todo(
    todo_id: str,
    username: str = Depends(get_current_username),
    todo_service: TodoService = Depends(get_todo_service),
):
    todo_service.delete_todo(username, todo_id)
