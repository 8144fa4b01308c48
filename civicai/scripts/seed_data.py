#!/usr/bin/env python3
"""
데모용 티켓 데이터 시딩 스크립트

Creates sample tickets without calling Gemini. Use --age-minutes to backdate
tickets so the escalation rule fires on the next read.

사용법:
    python -m civicai.scripts.seed_data --count 5
    python -m civicai.scripts.seed_data --count 3 --age-minutes 10 --store data/demo.json
"""
import argparse
from typing import List

from dotenv import load_dotenv
load_dotenv()

from civicai.config import get_settings
from civicai.models.ticket import (
    AIAnalysis,
    ComplaintDrafts,
    Coordinates,
    Severity,
    Ticket,
    TicketDraft,
)
from civicai.repositories.ticket_store import JsonFileTicketStore
from civicai.services.ticket_service import TicketService
from civicai.utils.clock import now_ms
from civicai.utils.logger import get_logger

logger = get_logger(__name__)

SAMPLES = [
    {
        "title": "Severe Pothole on Main St",
        "description": "Deep pothole across the left lane, exposed aggregate and standing water.",
        "severity": Severity.HIGH,
        "authority_id": "auth_muni",
        "image_url": "https://picsum.photos/id/1015/800/600",
        "objects": ["pothole", "road", "water"],
    },
    {
        "title": "Overflowing Garbage Bin",
        "description": "Public bin overflowing onto the footpath near the market entrance.",
        "severity": Severity.MEDIUM,
        "authority_id": "auth_muni",
        "image_url": "https://picsum.photos/id/93/800/600",
        "objects": ["garbage bin", "waste"],
    },
    {
        "title": "Broken Streetlight",
        "description": "Streetlight pole leaning with exposed wiring at the base.",
        "severity": Severity.EMERGENCY,
        "authority_id": "auth_elec",
        "image_url": "https://picsum.photos/id/102/800/600",
        "objects": ["streetlight", "wire"],
    },
    {
        "title": "Water Main Leak",
        "description": "Continuous leak from a cracked pipe flooding the service lane.",
        "severity": Severity.LOW,
        "authority_id": "auth_water",
        "image_url": None,
        "objects": ["pipe", "water"],
    },
]


def sample_draft(index: int) -> TicketDraft:
    sample = SAMPLES[index % len(SAMPLES)]
    return TicketDraft(
        title=sample["title"],
        description=sample["description"],
        image_url=sample["image_url"],
        severity=sample["severity"],
        location=Coordinates(lat=12.9716 + index * 0.001, lng=77.5946 + index * 0.001),
        address="MG Road, Bengaluru, Karnataka",
        authority_id=sample["authority_id"],
        ai_analysis=AIAnalysis(
            detected_objects=sample["objects"],
            confidence=0.9,
            reasoning="Seeded demo data.",
            detected_severity=sample["severity"],
        ),
        drafts=ComplaintDrafts(
            email_subject=f"Complaint: {sample['title']}",
            email_body=f"Dear Sir/Madam,\n\nPlease attend to: {sample['description']}\n\nRegards,\nA concerned citizen",
            whatsapp_message=f"Urgent: {sample['title']} at MG Road. Please act.",
        ),
    )


def seed(store_path: str, count: int, age_minutes: float) -> List[Ticket]:
    """Create count demo tickets, backdated by age_minutes"""
    settings = get_settings()
    offset_ms = int(age_minutes * 60 * 1000)
    store = JsonFileTicketStore(store_path, settings.ticket_store_slot)
    service = TicketService(store, settings=settings, clock=lambda: now_ms() - offset_ms)

    created = [service.create_ticket(sample_draft(i)) for i in range(count)]
    logger.info(f"Seeded {len(created)} tickets into {store_path}")
    return created


def main():
    parser = argparse.ArgumentParser(description="Seed demo tickets")
    parser.add_argument("--count", type=int, default=len(SAMPLES), help="Number of tickets")
    parser.add_argument("--age-minutes", type=float, default=0.0, help="Backdate tickets by N minutes")
    parser.add_argument("--store", default=None, help="Ticket store path (default from settings)")
    args = parser.parse_args()

    store_path = args.store or get_settings().ticket_store_path
    for ticket in seed(store_path, args.count, args.age_minutes):
        print(f"  #{ticket.id}  {ticket.severity.value:<9} {ticket.title}")


if __name__ == "__main__":
    main()
