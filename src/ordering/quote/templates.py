"""Admin email for a newly submitted quote request."""

from html import escape


class QuoteRequestAdminTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        lines = [
            f"- {item['title'] or item['category_name']} x {item['quantity']}"
            for item in context.get("items", [])
        ]
        notes = context.get("notes") or "None"

        body = (
            f"A new quote request {context['quote_id']} was submitted.\n\n"
            f"Customer: {context['user_id']}\n"
            f"Submitted: {context['submitted_at']}\n"
            f"Total items: {context['total_items']}\n\n"
            "Items:\n" + "\n".join(lines) + "\n\n"
            f"Notes: {notes}\n"
        )
        html_items = "".join(
            f"<li>{escape(item['title'] or item['category_name'])} &times; {item['quantity']}</li>"
            for item in context.get("items", [])
        )
        html_body = (
            f"<p>A new quote request <strong>{context['quote_id']}</strong> was submitted.</p>"
            f"<p>Customer: {context['user_id']}<br>Total items: {context['total_items']}</p>"
            f"<ul>{html_items}</ul>"
            f"<p>Notes: {escape(notes)}</p>"
        )

        return {
            "subject": f"New quote request #{context['quote_id']}",
            "body": body,
            "html_body": html_body,
        }
