# app/domains/models/__init__.py

"""
모든 도메인의 SQLModel 모델들을 한 곳에서 임포트하여,
SQLModel.metadata가 모든 테이블을 인식하도록 보장합니다 (Alembic, 테스트 DB 생성에서 사용).
"""

# usr (User, UserRole)
from app.domains.usr.models import User, UserRole

# inv (Item)
from app.domains.inv.models import Item

# pur (Purchase, PurchaseItem, PaymentMethod)
from app.domains.pur.models import Purchase, PurchaseItem, PaymentMethod

# wdn (WriteDown, WriteDownReason)
from app.domains.wdn.models import WriteDown, WriteDownReason


__all__ = [
    # usr
    "User", "UserRole",
    # inv
    "Item",
    # pur
    "Purchase", "PurchaseItem", "PaymentMethod",
    # wdn
    "WriteDown", "WriteDownReason",
]
