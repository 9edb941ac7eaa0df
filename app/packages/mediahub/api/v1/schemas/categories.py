"""分类与子分类的请求模型。"""

from typing import List, Optional

from pydantic import BaseModel, Field, model_validator


class CategoryCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: str = Field(..., min_length=1, max_length=120)
    description: Optional[str] = None
    cover_image: Optional[str] = None
    show_on_menu: bool = True
    menu_order: int = 0
    subcategory_ids: Optional[List[int]] = None

    @model_validator(mode="after")
    def _trim(self) -> "CategoryCreateRequest":
        self.name = self.name.strip()
        self.slug = self.slug.strip()
        if not self.name:
            raise ValueError("分类名称不能为空")
        if not self.slug:
            raise ValueError("分类别名不能为空")
        return self


class CategoryUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, max_length=100)
    slug: Optional[str] = Field(default=None, max_length=120)
    description: Optional[str] = None
    cover_image: Optional[str] = None
    show_on_menu: Optional[bool] = None
    menu_order: Optional[int] = None
    subcategory_ids: Optional[List[int]] = None


class SubcategoryCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: str = Field(..., min_length=1, max_length=120)
    description: Optional[str] = None
    category_ids: Optional[List[int]] = None


class SubcategoryUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, max_length=100)
    slug: Optional[str] = Field(default=None, max_length=120)
    description: Optional[str] = None
    category_ids: Optional[List[int]] = None
