# storefront/routes/saved.py
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from storefront.database import get_db
from storefront.models.users import Profile
from storefront.schemas.saved import SaveProductRequest, SavedProductOut, SavedState
from storefront.services import saved as saved_service
from storefront.utils.tokenJWT import get_current_user

router = APIRouter(prefix="/saved", tags=["Saved products"])


@router.get("", response_model=List[SavedProductOut])
def list_saved(db: Session = Depends(get_db), current_user: Profile = Depends(get_current_user)):
    return saved_service.list_saved(db, current_user.id)


@router.get("/check/{product_id}", response_model=SavedState)
def check_saved(product_id: int, db: Session = Depends(get_db), current_user: Profile = Depends(get_current_user)):
    return SavedState(product_id=product_id, saved=saved_service.is_saved(db, current_user.id, product_id))


# Saving is idempotent: a second call returns the existing entry
@router.post("", response_model=SavedProductOut)
def save_product(
    payload: SaveProductRequest,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    return saved_service.save(db, current_user.id, payload.product_id)


@router.post("/toggle/{product_id}", response_model=SavedState)
def toggle_saved(product_id: int, db: Session = Depends(get_db), current_user: Profile = Depends(get_current_user)):
    return SavedState(product_id=product_id, saved=saved_service.toggle(db, current_user.id, product_id))


@router.delete("/{saved_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_saved(saved_id: int, db: Session = Depends(get_db), current_user: Profile = Depends(get_current_user)):
    if not saved_service.unsave(db, current_user.id, saved_id):
        raise HTTPException(status_code=404, detail="Saved product not found")
