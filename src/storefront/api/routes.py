"""FastAPI routes for the Orders API: checkout, payment callback, lookups and status."""

from fastapi import APIRouter
from fastapi.responses import RedirectResponse
from protean.utils.globals import current_domain

from storefront.api.dependencies import (
    AdminDep,
    ContainerDep,
    CustomerDep,
    OptionalCustomerDep,
    PaymentCallbackDep,
    ViewerDep,
)
from storefront.api.schemas import (
    ApiResponse,
    CheckoutRequest,
    CustomerOrderPage,
    OrderDetailSchema,
    SellerOrderPage,
    UpdateOrderStatusRequest,
)
from storefront.order.status import SetOrderStatus
from storefront.utils.pagination import DEFAULT_LIMIT, DEFAULT_PAGE

order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("/checkout", status_code=201, response_model=ApiResponse)
async def checkout(body: CheckoutRequest, customer_id: CustomerDep, container: ContainerDep) -> ApiResponse:
    """Open a gateway payment for the caller's cart and record the pending order.

    The response carries the gateway's intent payload, which the client hands
    to the hosted payment widget.
    """
    payload = container.checkout.initiate_checkout(customer_id, body.address_id)
    return ApiResponse(status_code=201, data=payload, message="Payment order created")


@order_router.post("/verify", status_code=302)
async def verify_payment(
    body: PaymentCallbackDep,
    customer_id: OptionalCustomerDep,
    container: ContainerDep,
) -> RedirectResponse:
    result = container.fulfillment.confirm_payment(
        gateway_order_ref=body.razorpay_order_id,
        gateway_payment_ref=body.razorpay_payment_id,
        supplied_signature=body.razorpay_signature,
        customer_id=customer_id,
    )
    return RedirectResponse(
        url=container.settings.success_redirect_url(result.gateway_payment_ref),
        status_code=302,
    )


@order_router.get("/my-orders", response_model=ApiResponse)
async def my_orders(
    customer_id: CustomerDep,
    container: ContainerDep,
    page: int = DEFAULT_PAGE,
    limit: int = DEFAULT_LIMIT,
    status: str | None = None,
) -> ApiResponse:
    result = container.queries.my_orders(customer_id, page=page, limit=limit, status=status)
    return ApiResponse(
        data=CustomerOrderPage.model_validate(result).model_dump(mode="json"),
        message="Orders fetched successfully",
    )


@order_router.get("/admin", response_model=ApiResponse)
async def order_list_admin(
    requester: AdminDep,
    container: ContainerDep,
    page: int = DEFAULT_PAGE,
    limit: int = DEFAULT_LIMIT,
    status: str | None = None,
) -> ApiResponse:
    result = container.queries.order_list_admin(requester.user_id, page=page, limit=limit, status=status)
    return ApiResponse(
        data=SellerOrderPage.model_validate(result).model_dump(mode="json"),
        message="Orders fetched successfully",
    )


@order_router.get("/{order_id}", response_model=ApiResponse)
async def get_order(order_id: str, viewer: ViewerDep, container: ContainerDep) -> ApiResponse:
    """One order in full. Customers only see their own orders; anyone else's reads as not found."""
    detail = container.queries.get_order_by_id(order_id, customer_id=None if viewer.is_admin else viewer.customer_id)
    return ApiResponse(
        data=OrderDetailSchema.model_validate(detail).model_dump(mode="json"),
        message="Order fetched successfully",
    )


@order_router.patch("/{order_id}/status", response_model=ApiResponse)
async def update_order_status(
    order_id: str,
    body: UpdateOrderStatusRequest,
    requester: AdminDep,
) -> ApiResponse:
    command = SetOrderStatus(order_id=order_id, status=body.status, requester_id=requester.user_id)
    order = current_domain.process(command, asynchronous=False)
    return ApiResponse(
        data={"order_id": str(order.id), "status": order.status},
        message="Order status updated",
    )
