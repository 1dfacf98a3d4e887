"""
Project API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from core import forms
from core.db import Database
from core.dependencies import RecordId, get_db

from . import schemas, service

router = APIRouter()


@router.get("/projects")
async def list_projects(request: Request, db: Database = Depends(get_db)) -> dict:
    return await service.list_projects(db, request.query_params.multi_items())


@router.post("/projects", status_code=201)
async def create_project(request: Request, db: Database = Depends(get_db)) -> dict:
    """
    Create a project from JSON or multipart form data.

    File parts: `image_cover` (image), `images` (up to 5 images), `file` (PDF).
    """
    payload, files = await forms.read_payload(request, schemas.ProjectCreate)
    project = await service.create_project(db, payload, files)
    return {"success": True, "data": project}


@router.get("/projects/{project_id}")
async def get_project(project_id: RecordId, db: Database = Depends(get_db)) -> dict:
    return {"success": True, "data": await service.get_project(db, project_id)}


@router.put("/projects/{project_id}")
async def update_project(project_id: RecordId, request: Request, db: Database = Depends(get_db)) -> dict:
    payload, files = await forms.read_payload(request, schemas.ProjectUpdate)
    project = await service.update_project(db, project_id, payload, files)
    return {"success": True, "data": project}


@router.delete("/projects/{project_id}", status_code=204)
async def delete_project(project_id: RecordId, db: Database = Depends(get_db)) -> Response:
    await service.delete_project(db, project_id)
    return Response(status_code=204)


@router.patch("/projects/{project_id}/status")
async def update_project_status(
    project_id: RecordId,
    payload: schemas.ProjectStatusUpdate,
    db: Database = Depends(get_db),
) -> dict:
    project = await service.update_status(db, project_id, payload.status)
    return {"success": True, "data": project}


@router.patch("/projects/{project_id}/toggle-publish")
async def toggle_project_publication(project_id: RecordId, db: Database = Depends(get_db)) -> dict:
    return {"success": True, "data": await service.toggle_publication(db, project_id)}
