# storefront/routes/products.py
from typing import Optional, List
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from storefront.database import get_db
from storefront.models.users import Profile
from storefront.services import catalog, tracking
from storefront.utils.audit import write_log, client_ip
from storefront.utils.tokenJWT import get_optional_user, role_required
import storefront.schemas.product as product_schemas

router = APIRouter(tags=["Products"])


# =========================
# PUBLIC CATALOG
# =========================
@router.get("/products", response_model=product_schemas.ProductList)
def list_products(
    category: Optional[str] = Query(None, description="Category name, 'all' for no filter"),
    q: Optional[str] = Query(None, description="Search name, description, company or category"),
    in_stock: bool = Query(False),
    db: Session = Depends(get_db),
):
    items = catalog.list_products(db, category=category, q=q, in_stock_only=in_stock)
    return {"items": items, "total": len(items)}


@router.get("/products/categories", response_model=List[str])
def get_product_categories(db: Session = Depends(get_db)):
    return catalog.list_categories(db)


# Every view is recorded for the seller, except the seller looking at their own listing
@router.get("/products/{product_id}", response_model=product_schemas.ProductOut)
def get_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[Profile] = Depends(get_optional_user),
):
    product = catalog.get_product(db, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    user_id = current_user.id if current_user else None
    if user_id != product.seller_id:
        tracking.record_view(db, product, user_id=user_id)
    return product


# =========================
# SELLER INVENTORY
# =========================
@router.get("/seller/products", response_model=List[product_schemas.ProductOut])
def list_seller_products(
    db: Session = Depends(get_db),
    current_user: Profile = Depends(role_required("seller")),
):
    return catalog.list_seller_products(db, current_user.id)


@router.post("/seller/products", response_model=product_schemas.ProductOut, status_code=status.HTTP_201_CREATED)
def create_product(
    payload: product_schemas.ProductCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(role_required("seller")),
):
    product = catalog.create_product(db, current_user.id, payload.model_dump())
    write_log(db, user_id=current_user.id, action="PRODUCT_CREATE", resource="products",
              ip=client_ip(request), meta={"product_id": product.id})
    return product


@router.patch("/seller/products/{product_id}", response_model=product_schemas.ProductOut)
def update_product(
    product_id: int,
    payload: product_schemas.ProductEditRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(role_required("seller")),
):
    update_data = payload.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=400, detail="No data provided for update")

    product = catalog.update_product(db, current_user.id, product_id, update_data)
    write_log(db, user_id=current_user.id, action="PRODUCT_UPDATE", resource="products",
              ip=client_ip(request), meta={"product_id": product_id, "fields": sorted(update_data)})
    return product


@router.delete("/seller/products/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(role_required("seller")),
):
    catalog.delete_product(db, current_user.id, product_id)
    write_log(db, user_id=current_user.id, action="PRODUCT_DELETE", resource="products",
              ip=client_ip(request), meta={"product_id": product_id})
