from pydantic import BaseModel, ConfigDict

class CamelRequest(BaseModel):
    """Request bodies sent by the browser client use camelCase keys."""

    model_config = ConfigDict(populate_by_name=True)

class SuccessResponse(BaseModel):
    success: bool = True
    message: str | None = None
