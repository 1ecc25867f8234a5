from typing import Annotated

from fastapi import Depends

from app.payments.portone import PortOneClient, get_payment_client

PaymentClientDep = Annotated[PortOneClient, Depends(get_payment_client)]
