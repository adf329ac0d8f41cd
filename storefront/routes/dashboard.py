# storefront/routes/dashboard.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.database import get_db
from storefront.models.users import Profile
from storefront.schemas.dashboard import BuyerSummary, SellerSummary, AdminSummary
from storefront.schemas.user import ProfileResponse
from storefront.services import dashboard
from storefront.utils.tokenJWT import get_current_user, role_required

router = APIRouter(tags=["Dashboard"])


# Retrieve current authenticated profile
@router.get("/me", response_model=ProfileResponse)
def me(current_user: Profile = Depends(get_current_user)):
    return current_user


# === Per-role summaries ===

@router.get("/dashboard/buyer", response_model=BuyerSummary)
def buyer_dashboard(db: Session = Depends(get_db), current_user: Profile = Depends(get_current_user)):
    return dashboard.buyer_summary(db, current_user.id)


@router.get("/dashboard/seller", response_model=SellerSummary)
def seller_dashboard(db: Session = Depends(get_db), current_user: Profile = Depends(role_required("seller"))):
    return dashboard.seller_summary(db, current_user.id)


@router.get("/dashboard/admin", response_model=AdminSummary)
def admin_dashboard(db: Session = Depends(get_db), current_user: Profile = Depends(role_required("admin"))):
    return dashboard.admin_summary(db)
