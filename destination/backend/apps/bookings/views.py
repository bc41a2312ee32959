from rest_framework import generics, permissions
from rest_framework.views import APIView
from rest_framework.response import Response
from django.db.models import Sum, Count
from django.utils import timezone
from decimal import Decimal, InvalidOperation
import structlog

from .models import Booking, Favorite
from .serializers import BookingSerializer, BookingUpdateSerializer, FavoriteSerializer
from apps.core.models import AuditLog, Notification
from apps.core.permissions import IsAdmin, IsCustomerOrAdmin, is_admin
from apps.listings.registry import find_listing
from apps.mailer.services import send_workflow_email

logger = structlog.get_logger(__name__)


def _get_booking(request, pk):
    """Booking visible to the caller: their own, or any for admins."""
    qs = Booking.objects.all()
    if not is_admin(request.user):
        qs = qs.filter(customer=request.user)
    return qs.filter(pk=pk).first()


def _send_status_update(booking):
    send_workflow_email("booking_status_update", booking.guest_email, booking.email_context(),
                        user=booking.customer, related=booking)


class BookingListCreateView(generics.ListCreateAPIView):
    serializer_class = BookingSerializer
    permission_classes = [IsCustomerOrAdmin]

    def get_queryset(self):
        qs = Booking.objects.filter(customer=self.request.user)
        q = self.request.query_params
        if q.get("status"):
            qs = qs.filter(booking_status=q["status"])
        if q.get("item_type"):
            qs = qs.filter(item_type=q["item_type"])
        sort_by = q.get("sort_by")
        if sort_by == "date":
            return qs.order_by("-check_in_date", "-created_at")
        if sort_by == "amount":
            return qs.order_by("-total_amount")
        return qs.order_by("-created_at")

    def get_serializer_context(self):
        ctx = super().get_serializer_context()
        ctx["request"] = self.request
        return ctx

    def perform_create(self, serializer):
        booking = serializer.save()
        user = self.request.user
        AuditLog.log(user, "booking_created",
                     {"booking_id": booking.id, "amount": str(booking.total_amount)}, self.request)
        sent = send_workflow_email("booking_confirmation", booking.guest_email,
                                   booking.email_context(), user=user, related=booking)
        if sent:
            booking.confirmation_sent = True
            booking.save(update_fields=["confirmation_sent"])
        Notification.notify(
            user, "Booking confirmed",
            "Your booking for " + booking.item_name + " is confirmed (" + booking.confirmation_number + ").",
            notif_type="booking", link="/bookings",
        )
        logger.info("booking created", booking_id=booking.id, item_type=booking.item_type,
                    item_id=booking.item_id, confirmation_sent=sent)


class BookingDetailView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, pk):
        booking = _get_booking(request, pk)
        if not booking:
            return Response({"error": "Booking not found"}, status=404)
        return Response(BookingSerializer(booking).data)

    def patch(self, request, pk):
        booking = _get_booking(request, pk)
        if not booking:
            return Response({"error": "Booking not found"}, status=404)
        if booking.booking_status == "cancelled":
            return Response({"error": "Cancelled bookings cannot be modified"}, status=400)
        serializer = BookingUpdateSerializer(booking, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            AuditLog.log(request.user, "booking_updated",
                         {"booking_id": booking.id, "fields": sorted(serializer.validated_data)}, request)
            return Response(BookingSerializer(booking).data)
        return Response(serializer.errors, status=400)


class BookingCancelView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, pk):
        booking = _get_booking(request, pk)
        if not booking:
            return Response({"error": "Booking not found"}, status=404)
        if booking.booking_status == "cancelled":
            return Response({"error": "Booking is already cancelled"}, status=400)
        if booking.booking_status in ("completed", "no_show"):
            return Response({"error": "Cannot cancel this booking"}, status=400)

        refund = request.data.get("refund_amount")
        if refund not in (None, ""):
            try:
                refund = Decimal(str(refund))
            except InvalidOperation:
                return Response({"error": "Invalid refund amount"}, status=400)
            if not refund.is_finite() or refund < 0 or refund > booking.total_amount:
                return Response({"error": "Refund amount must be between 0 and the booking total"}, status=400)
        else:
            refund = None

        booking.booking_status = "cancelled"
        booking.cancellation_reason = request.data.get("reason", "")
        booking.cancellation_date = timezone.now()
        booking.refund_amount = refund
        booking.payment_status = "refunded" if refund else "failed"
        booking.save()

        AuditLog.log(request.user, "booking_cancelled",
                     {"booking_id": booking.id, "refund_amount": str(refund or 0)}, request)
        _send_status_update(booking)
        if booking.customer_id != request.user.id:
            Notification.notify(
                booking.customer, "Booking cancelled",
                "Your booking for " + booking.item_name + " has been cancelled.",
                notif_type="cancellation", link="/bookings",
            )
        return Response({"message": "Booking cancelled successfully",
                         "booking": BookingSerializer(booking).data})


class BookingStatusView(APIView):
    permission_classes = [IsAdmin]
    ALLOWED = ("confirmed", "completed", "no_show")

    def post(self, request, pk):
        booking = Booking.objects.filter(pk=pk).first()
        if not booking:
            return Response({"error": "Booking not found"}, status=404)
        new_status = request.data.get("status")
        if new_status not in self.ALLOWED:
            return Response({"error": "Status must be one of: " + ", ".join(self.ALLOWED)}, status=400)
        booking.booking_status = new_status
        if new_status == "completed" and booking.payment_status == "pending":
            booking.payment_status = "completed"
        booking.save()
        AuditLog.log(request.user, "booking_status_changed",
                     {"booking_id": booking.id, "status": new_status}, request)
        _send_status_update(booking)
        Notification.notify(
            booking.customer, "Booking updated",
            "Your booking for " + booking.item_name + " is now " + booking.get_booking_status_display() + ".",
            notif_type="booking", link="/bookings",
        )
        return Response(BookingSerializer(booking).data)


class BookingStatsView(APIView):
    permission_classes = [IsAdmin]

    def get(self, request):
        by_status = dict(Booking.objects.values_list("booking_status").annotate(n=Count("id")).order_by())
        by_type = dict(Booking.objects.values_list("item_type").annotate(n=Count("id")).order_by())
        revenue = Booking.objects.filter(booking_status="completed").aggregate(
            total=Sum("total_amount"))["total"] or 0
        return Response({
            "total": sum(by_status.values()),
            "confirmed": by_status.get("confirmed", 0),
            "cancelled": by_status.get("cancelled", 0),
            "completed": by_status.get("completed", 0),
            "no_show": by_status.get("no_show", 0),
            "total_revenue": revenue,
            "by_item_type": by_type,
        })


class FavoriteView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        favorites = Favorite.objects.filter(user=request.user)
        if request.query_params.get("item_type"):
            favorites = favorites.filter(item_type=request.query_params["item_type"])
        return Response({"results": FavoriteSerializer(favorites, many=True).data})

    def post(self, request):
        serializer = FavoriteSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=400)
        item_type = serializer.validated_data["item_type"]
        item_id = serializer.validated_data["item_id"]
        listing = find_listing(item_type, item_id)
        if listing is None:
            return Response({"error": "Item not found"}, status=404)
        fav, created = Favorite.objects.get_or_create(
            user=request.user, item_type=item_type, item_id=item_id,
            defaults={"item_name": listing.name, "notes": serializer.validated_data.get("notes", "")},
        )
        return Response({"created": created, "favorite": FavoriteSerializer(fav).data},
                        status=201 if created else 200)

    def delete(self, request):
        item_type = request.data.get("item_type") or request.query_params.get("item_type")
        item_id = request.data.get("item_id") or request.query_params.get("item_id")
        if not item_type or not item_id:
            return Response({"error": "item_type and item_id are required"}, status=400)
        deleted, _ = Favorite.objects.filter(user=request.user, item_type=item_type, item_id=item_id).delete()
        if not deleted:
            return Response({"error": "Favorite not found"}, status=404)
        return Response({"message": "Removed from favorites"})
