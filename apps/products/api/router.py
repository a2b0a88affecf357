from fastapi import APIRouter, Depends, Response, status
from fastapi.responses import JSONResponse
from sqlmodel.ext.asyncio.session import AsyncSession
from framework.config import settings
from framework.database.manager import DatabaseManager
from framework.domain.result import Result
from framework.repository.unit_of_work import UnitOfWork
from ..schemas import CreateProductDto, ProductPage, ProductViewModel
from ..service import ProductService

router = APIRouter()

async def get_db():
    """Get database session."""
    manager = DatabaseManager.get_instance()
    async for session in manager.sql.get_session():
        yield session

async def get_uow(db: AsyncSession = Depends(get_db)):
    """Dependency: one UnitOfWork per request, disposed when the response is done."""
    async with UnitOfWork(session=db) as uow:
        yield uow

def get_product_service(uow: UnitOfWork = Depends(get_uow)) -> ProductService:
    """Dependency: create ProductService."""
    return ProductService(uow)

def error_response(result: Result) -> JSONResponse:
    """Map a failed Result to its HTTP status with the error list as body."""
    return JSONResponse(
        status_code=result.error.type.http_status,
        content=[error.model_dump(mode="json") for error in result.errors],
    )

@router.post("", status_code=status.HTTP_201_CREATED, response_model=ProductViewModel)
async def create_product(
    payload: CreateProductDto,
    service: ProductService = Depends(get_product_service)
):
    """Create a product; 400 with the validation errors when the input is rejected."""
    result = await service.create(payload.description, payload.price)
    if result.is_failure:
        return error_response(result)

    product = result.value
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=product.model_dump(mode="json"),
        headers={"Location": f"{settings.API_PRODUCTS_PREFIX}/{product.id}"},
    )

@router.get("", response_model=ProductPage)
async def list_products(
    page: int = 1,
    page_size: int = 10,
    service: ProductService = Depends(get_product_service)
):
    """List active products (page_size is capped at 100)."""
    result = await service.list_products(page, page_size)
    return result.value

@router.get("/{product_id}", response_model=ProductViewModel)
async def get_product(
    product_id: int,
    service: ProductService = Depends(get_product_service)
):
    result = await service.get_by_id(product_id)
    if result.is_failure:
        return error_response(result)
    return result.value

@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: int,
    service: ProductService = Depends(get_product_service)
):
    """Soft-delete a product."""
    result = await service.delete(product_id)
    if result.is_failure:
        return error_response(result)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
