from datetime import datetime
import json
import logging
from urllib.error import URLError
from urllib.request import Request, urlopen

from flask import current_app

from app.domain.entities import parse_date
from app.domain.pricing import format_amount

logger = logging.getLogger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org/bot{token}/sendMessage"
DIVIDER = "------------------------------------"
CONTACT_SUBJECT_EMOJI = {
    "Tour Inquiry": "🎫",
    "Booking Question": "❓",
    "Custom Tour Request": "✨",
    "General Question": "💬",
}


def _long_date(value):
    parsed = parse_date(value)
    if parsed is None:
        return "N/A"
    return f"{parsed:%A}, {parsed:%B} {parsed.day}, {parsed.year}"


class NotificationService:
    @staticmethod
    def format_tour_booking(booking, tour_title=None):
        tour_title = tour_title or (booking.tour.title if booking.tour else "Unknown Tour")
        phone = booking.customer_phone or "Not provided"
        lines = ["🌴 *Mystic Tours - New Booking!* 🌴", ""]
        if booking.created_by_staff:
            lines += ["📞 *ADMIN BOOKING* - Created by dispatch", ""]
        lines += [
            "A new booking has been requested. Please review the details below.",
            "",
            "🎫 *Booking Details*",
            DIVIDER,
            f"🗺️ *Tour:* {tour_title}",
            f"🗓️ *Date:* {_long_date(booking.booking_date)}",
            f"🧑‍🤝‍🧑 *Guests:* {booking.number_of_people}",
            f"💰 *Total Amount:* *{format_amount(booking.total_amount)}*",
        ]
        if booking.special_requests:
            lines.append(f"📝 *Special Requests:* {booking.special_requests}")
        lines += [
            f"🆔 *Booking ID:* `{booking.uuid}`",
            DIVIDER,
            "",
            "👤 *Customer Info*",
            DIVIDER,
            f"👨‍🦱 *Name:* {booking.customer_name}",
            f"📞 *Phone:* `{phone}`",
            f"✉️ *Email:* {booking.customer_email}",
            DIVIDER,
            "",
            "*🚨 ACTION REQUIRED 🚨*",
            f"Please call the customer at *{phone}* to confirm the booking and discuss payment options.",
            "",
            "🤖 _Mystic Booking Bot_",
        ]
        return "\n".join(lines)

    @staticmethod
    def format_airport_booking(booking):
        lines = [
            "🚐 *Airport Transfer Request* ✈️",
            "",
            f"👤 *Customer:* {booking.customer_name}",
            f"📞 *Phone:* `{booking.customer_phone or 'N/A'}`",
            f"✉️ *Email:* {booking.customer_email}",
            "",
            f"🛠️ *Service Type:* {booking.service_type.capitalize()}",
            f"🧑‍🤝‍🧑 *Passengers:* {booking.passengers}",
            f"💰 *Total Price:* *{format_amount(booking.total_price)}*",
            "",
        ]
        if booking.notes:
            lines += [f"📝 *Notes:* {booking.notes}", ""]
        if booking.service_type in {"pickup", "both"}:
            lines += [
                "*Arrival Details*",
                f"Flight: `{booking.flight_number}`",
                f"Date: {_long_date(booking.arrival_date)}",
                f"Time: {booking.arrival_time}",
                f"Drop-off: {booking.dropoff_location}",
                "",
            ]
        if booking.service_type in {"dropoff", "both"}:
            lines += [
                "*Departure Details*",
                f"Flight: `{booking.departure_flight_number}`",
                f"Date: {_long_date(booking.departure_date)}",
                f"Time: {booking.departure_time}",
                f"Pickup: {booking.pickup_location}",
                "",
            ]
        lines += [
            "*🚨 ACTION REQUIRED 🚨*",
            f"Confirm booking with customer at `{booking.customer_phone or booking.customer_email}`.",
            "",
            f"🆔 *Booking ID:* `{booking.uuid}`",
            "🤖 _Mystic Booking Bot_",
        ]
        return "\n".join(lines)

    @staticmethod
    def format_contact_message(contact):
        emoji = CONTACT_SUBJECT_EMOJI.get(contact.subject, "📧")
        lines = [
            f"{emoji} *Contact Form Submission* 📝",
            "",
            "A new message has been received through the contact form.",
            "",
            "*📋 Message Details*",
            DIVIDER,
            f"{emoji} *Subject:* {contact.subject}",
            f"👤 *Name:* {contact.name}",
            f"✉️ *Email:* {contact.email}",
            DIVIDER,
            "",
            "*💬 Message:*",
            f"```\n{contact.message}\n```",
            "",
            "*🚨 ACTION REQUIRED 🚨*",
            f"Please respond to the customer at *{contact.email}*.",
            "",
            "🤖 _Mystic Contact Bot_",
        ]
        return "\n".join(lines)

    @staticmethod
    def format_newsletter_message(signup, now=None):
        now = now or datetime.now()
        lines = [
            "📧 *New Newsletter Subscription* 🌴",
            "",
            "Someone just joined the Island Mystic Tours tribe!",
            "",
            "*📋 Subscription Details*",
            DIVIDER,
            f"📧 *Email:* {signup.email}",
            f"📅 *Date:* {_long_date(now)} at {now:%I:%M %p}",
            "📍 *Source:* Website Newsletter Form",
            DIVIDER,
            "",
            "*📝 ACTIONS TO TAKE*",
            "✅ Add email to newsletter list",
            "✅ Send welcome email with travel tips",
            "✅ Include in future tour promotions",
            "",
            "🤖 _Mystic Newsletter Bot_",
        ]
        return "\n".join(lines)

    @staticmethod
    def send_telegram(message):
        """Post ``message`` to the staff chat; returns ``{"success", "message"}`` and never raises."""
        config = current_app.config
        if not config.get("NOTIFICATIONS_ENABLED", True):
            return {"success": False, "message": "Notifications disabled."}

        token = config.get("TELEGRAM_BOT_TOKEN")
        chat_id = config.get("TELEGRAM_CHAT_ID")
        if not token or not chat_id:
            logger.error("Telegram bot token or chat ID is not configured.")
            return {"success": False, "message": "Telegram credentials not configured."}

        body = json.dumps({"chat_id": chat_id, "text": message, "parse_mode": "Markdown"}).encode("utf-8")
        req = Request(
            TELEGRAM_API_URL.format(token=token),
            data=body,
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        try:
            with urlopen(req, timeout=config.get("TELEGRAM_TIMEOUT", 8)) as response:
                result = json.loads(response.read().decode("utf-8"))
        except (URLError, OSError, ValueError) as exc:
            logger.warning("Telegram notification failed: %s", exc)
            return {"success": False, "message": str(exc)}

        if not result.get("ok"):
            description = result.get("description", "unknown error")
            logger.warning("Telegram API error: %s", description)
            return {"success": False, "message": f"Telegram API error: {description}"}
        return {"success": True, "message": "Telegram notification sent successfully"}

    @staticmethod
    def notify_booking_created(booking):
        if booking.kind == "tour":
            message = NotificationService.format_tour_booking(booking)
        else:
            message = NotificationService.format_airport_booking(booking)
        result = NotificationService.send_telegram(message)
        if not result["success"]:
            logger.warning("Booking %s saved without staff notification: %s", booking.ref, result["message"])
        return result

    @staticmethod
    def notify_contact(contact):
        result = NotificationService.send_telegram(NotificationService.format_contact_message(contact))
        if not result["success"]:
            logger.warning("Contact message from %s not delivered: %s", contact.email, result["message"])
        return result

    @staticmethod
    def notify_newsletter(signup):
        result = NotificationService.send_telegram(NotificationService.format_newsletter_message(signup))
        if not result["success"]:
            logger.warning("Newsletter signup %s not delivered: %s", signup.email, result["message"])
        return result
