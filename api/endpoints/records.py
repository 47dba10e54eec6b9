from fastapi import APIRouter, Depends, HTTPException, Response
from domain.services.records import record_key
from api.deps import Services, get_services

router = APIRouter()


@router.get("/records/{record_id}")
async def get_record(record_id: str, services: Services = Depends(get_services)):
    record = await services.records.load(record_key(record_id))
    if not record:
        raise HTTPException(status_code=404, detail="record not found")
    return record.model_dump(by_alias=True, exclude_none=True)


async def _blob(services: Services, path: str, media_type: str) -> Response:
    data = await services.storage.read(path)
    if data is None:
        raise HTTPException(status_code=404, detail="file not found")
    return Response(content=data, media_type=media_type)


@router.get("/records/{record_id}/preview")
async def get_preview(record_id: str, services: Services = Depends(get_services)) -> Response:
    record = await services.records.load(record_key(record_id))
    if not record:
        raise HTTPException(status_code=404, detail="record not found")
    return await _blob(services, record.preview_path, "image/png")


@router.get("/records/{record_id}/source")
async def get_source(record_id: str, services: Services = Depends(get_services)) -> Response:
    record = await services.records.load(record_key(record_id))
    if not record:
        raise HTTPException(status_code=404, detail="record not found")
    return await _blob(services, record.source_path, "application/pdf")
