from datetime import datetime

from app.common.schemas import CamelModel


class DownloadData(CamelModel):
    download_url: str
    expires_at: datetime
    filename: str


class DownloadResponse(CamelModel):
    success: bool = True
    data: DownloadData
