"""Release of liability waiver rendered to PDF with reportlab."""
from io import BytesIO

from reportlab.lib.pagesizes import letter
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from polyface.config.settings import settings

from .models import WAIVER_DOCUMENT_NAME, WaiverSignature

MARGIN = 60
BODY_FONT = ("Helvetica", 9)
BODY_LEADING = 12

WAIVER_SECTIONS: list[tuple[str | None, list[str]]] = [
    (
        None,
        [
            "I acknowledge that I am voluntarily participating in volleyball lessons, training sessions, "
            'camps, or related activities offered by {venue} ("the Academy").',
            "I understand that participation in volleyball activities involves inherent risks, including but "
            "not limited to physical contact with other participants, falls, collisions, impact with "
            "volleyballs or equipment, overuse injuries, property damage, and serious injury or death. I "
            "knowingly and voluntarily assume all such risks, whether known or unknown, associated with my "
            "participation.",
            "I hereby release, waive, and discharge {venue}, and its owners, coaches, instructors, employees, "
            "agents, and representatives from any and all claims arising out of or related to my "
            "participation in Academy activities, including claims arising from ordinary negligence.",
            "This release does not apply to acts of gross negligence, recklessness, or intentional misconduct.",
            "I agree to follow all rules, safety instructions, and guidelines provided by the Academy and its "
            "staff, and I agree to indemnify and hold harmless {venue} from any claims brought by any third "
            "party arising out of or related to my participation.",
        ],
    ),
    (
        "MINOR PARTICIPANTS (If Applicable)",
        [
            "If the participant is under eighteen (18) years of age, I represent that I am the parent or legal "
            "guardian of the minor participant. I consent to the minor's participation and execute this "
            "agreement on behalf of both myself and the minor.",
        ],
    ),
    (
        "IMAGE / VIDEO / LIKENESS RELEASE",
        [
            "I grant {venue} permission to photograph, record, or otherwise capture my image, voice, or "
            "likeness (or that of the minor participant) during Academy activities and to use such media for "
            "lawful promotional, marketing, educational, and social media purposes, without compensation.",
        ],
    ),
    (
        "ACKNOWLEDGMENT AND ELECTRONIC ACCEPTANCE",
        [
            'By selecting "I Agree", I acknowledge that I have read and understand this agreement and that I '
            "am voluntarily giving up certain legal rights.",
        ],
    ),
]


class _Writer:
    """Top-down text cursor that starts a new page when it runs out of room."""

    def __init__(self, pdf: canvas.Canvas):
        self.pdf = pdf
        self.width, self.height = letter
        self.y = self.height - MARGIN

    def ensure_room(self, needed: float) -> None:
        if self.y - needed < MARGIN:
            self.pdf.showPage()
            self.y = self.height - MARGIN

    def centered(self, text: str, font: str, size: int) -> None:
        self.ensure_room(size + 6)
        self.pdf.setFont(font, size)
        self.pdf.drawCentredString(self.width / 2, self.y, text)
        self.y -= size + 6

    def heading(self, text: str) -> None:
        self.y -= 6
        self.ensure_room(18)
        self.pdf.setFont("Helvetica-Bold", 11)
        self.pdf.drawString(MARGIN, self.y, text)
        self.y -= 16

    def paragraph(self, text: str) -> None:
        font, size = BODY_FONT
        lines = simpleSplit(text, font, size, self.width - 2 * MARGIN)
        self.pdf.setFont(font, size)
        for line in lines:
            self.ensure_room(BODY_LEADING)
            self.pdf.drawString(MARGIN, self.y, line)
            self.y -= BODY_LEADING
        self.y -= 6

    def field(self, label: str, value: str) -> None:
        self.ensure_room(20)
        self.pdf.setFont("Helvetica", 11)
        self.pdf.drawString(MARGIN, self.y, label)
        self.pdf.setFont("Helvetica-Bold", 12)
        self.pdf.drawString(MARGIN + 90, self.y, value)
        self.y -= 20

    def rule(self) -> None:
        self.ensure_room(20)
        self.pdf.setStrokeGray(0.75)
        self.pdf.line(MARGIN, self.y, self.width - MARGIN, self.y)
        self.y -= 20


def generate_waiver_pdf(signature: WaiverSignature, venue_name: str | None = None) -> bytes:
    """Render the signed waiver and return the PDF bytes."""
    venue = venue_name or settings.VENUE_NAME
    buffer = BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=letter)
    pdf.setTitle(WAIVER_DOCUMENT_NAME)
    pdf.setAuthor(signature.full_name)
    pdf.setCreator(venue)

    writer = _Writer(pdf)
    writer.centered(venue.upper(), "Helvetica-Bold", 18)
    if settings.VENUE_CITY_STATE_ZIP:
        writer.centered(settings.VENUE_CITY_STATE_ZIP, "Helvetica", 10)
    writer.centered("Release of Liability, Assumption of Risk,", "Helvetica-Bold", 13)
    writer.centered("and Indemnification Agreement", "Helvetica-Bold", 13)
    writer.rule()

    for title, paragraphs in WAIVER_SECTIONS:
        if title:
            writer.heading(title)
        for text in paragraphs:
            writer.paragraph(text.format(venue=venue))

    writer.rule()
    writer.heading("PARENT/GUARDIAN ACKNOWLEDGMENT" if signature.is_minor else "PARTICIPANT ACKNOWLEDGMENT")
    writer.field("Name:", signature.full_name)
    writer.field("Email:", signature.email)
    writer.field("Phone:", signature.phone_number)
    writer.field("Date Signed:", signature.signed_at.strftime("%B %d, %Y %H:%M UTC"))
    writer.field("Signature:", signature.full_name)

    pdf.setFont("Helvetica", 9)
    pdf.setFillGray(0.5)
    pdf.drawString(MARGIN, MARGIN / 2, f"This document was digitally signed through the {venue} app.")
    pdf.showPage()
    pdf.save()
    buffer.seek(0)
    return buffer.read()
