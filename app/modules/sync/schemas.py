from typing import Dict, List

from app.common.schemas import CamelModel


class TableSyncStats(CamelModel):
    uploaded: int
    downloaded: int


class SyncResponse(CamelModel):
    success: bool
    uploaded: int
    downloaded: int
    errors: List[str] = []
    tables: Dict[str, TableSyncStats] = {}
