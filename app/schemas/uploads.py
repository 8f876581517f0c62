from pydantic import BaseModel, ConfigDict, Field


class UploadedFile(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: str
    file_name: str = Field(alias="fileName")


class UploadedFiles(BaseModel):
    files: list[UploadedFile]


class DeleteResponse(BaseModel):
    success: bool = True
