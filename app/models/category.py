"""
app/models/category.py

"""


from pydantic import BaseModel, Field, ConfigDict, field_validator


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        cleaned = v.strip()
        if not cleaned:
            raise ValueError("Category name is required")
        return cleaned


class CategoryResponse(BaseModel):
    id: str = Field(alias="_id")
    name: str

    model_config = ConfigDict(populate_by_name=True)
