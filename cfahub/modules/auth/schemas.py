from pydantic import BaseModel
from typing import Optional, Dict, Any, List


class CurrentUserResponse(BaseModel):
    id: str
    email: Optional[str] = None
    user_metadata: Dict[str, Any] = {}
    active_group_id: Optional[str] = None
    group_ids: List[str] = []
