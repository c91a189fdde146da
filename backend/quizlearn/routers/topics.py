from typing import Mapping

from fastapi import APIRouter, Depends

from ..topics import Topic, get_catalog

router = APIRouter(prefix="/api/topics", tags=["topics"])


@router.get("")
def list_topics(catalog: Mapping[str, Topic] = Depends(get_catalog)):
	return {"success": True, "topics": [t.as_dict() for t in catalog.values()]}
