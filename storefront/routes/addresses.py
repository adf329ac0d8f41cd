# storefront/routes/addresses.py
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from storefront.database import get_db
from storefront.models.users import Profile
from storefront.schemas.address import AddressCreate, AddressUpdate, AddressOut
from storefront.services import addresses as address_service
from storefront.utils.tokenJWT import get_current_user

router = APIRouter(prefix="/addresses", tags=["Addresses"])


# Default address first
@router.get("", response_model=List[AddressOut])
def list_addresses(db: Session = Depends(get_db), current_user: Profile = Depends(get_current_user)):
    return address_service.list_addresses(db, current_user.id)


@router.post("", response_model=AddressOut, status_code=status.HTTP_201_CREATED)
def create_address(
    payload: AddressCreate,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    return address_service.create_address(db, current_user.id, payload.model_dump())


@router.patch("/{address_id}", response_model=AddressOut)
def update_address(
    address_id: int,
    payload: AddressUpdate,
    db: Session = Depends(get_db),
    current_user: Profile = Depends(get_current_user),
):
    update_data = payload.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=400, detail="No data provided for update")
    return address_service.update_address(db, current_user.id, address_id, update_data)


@router.delete("/{address_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_address(address_id: int, db: Session = Depends(get_db), current_user: Profile = Depends(get_current_user)):
    address_service.delete_address(db, current_user.id, address_id)
