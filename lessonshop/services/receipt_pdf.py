from __future__ import annotations

import os

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from lessonshop.config import settings


def receipt_path(order_number: str) -> str:
    return os.path.join(settings.export_dir, f"order_{order_number}.pdf")


def generate_receipt_pdf(result) -> str:
    os.makedirs(settings.export_dir, exist_ok=True)
    path = receipt_path(result.number)

    c = canvas.Canvas(path, pagesize=A4)
    w, h = A4

    y = h - 50
    c.setFont("Helvetica-Bold", 14)
    c.drawString(40, y, f"ORDER #{result.number}")
    y -= 20

    c.setFont("Helvetica", 11)
    c.drawString(40, y, f"Name: {result.order.name}")
    y -= 16
    c.drawString(40, y, f"Phone: {result.order.phone}")
    y -= 16
    c.drawString(40, y, f"Date: {result.created_at}")
    y -= 16
    c.drawString(40, y, f"Currency: {settings.currency}")
    y -= 24

    # header
    c.setFont("Helvetica-Bold", 10)
    c.drawString(40, y, "Lesson")
    c.drawString(300, y, "Location")
    c.drawString(480, y, "Price")
    y -= 10
    c.line(40, y, 550, y)
    y -= 16

    c.setFont("Helvetica", 10)
    for line in result.lines:
        c.drawString(40, y, f"#{line.id} {line.subject}"[:45])
        c.drawString(300, y, str(line.location)[:25])
        c.drawRightString(550, y, f"{float(line.price):.{settings.decimals}f}")
        y -= 14
        if y < 80:
            c.showPage()
            y = h - 50
            c.setFont("Helvetica", 10)

    y -= 10
    c.line(40, y, 550, y)
    y -= 18
    c.setFont("Helvetica-Bold", 12)
    c.drawRightString(550, y, f"ITEMS: {result.order.spaces}   TOTAL: {result.total:.{settings.decimals}f} {settings.currency}")

    c.save()
    return path
