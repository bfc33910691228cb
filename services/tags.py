"""Service tags for hairstyling jobs."""

from collections import Counter
from typing import Iterable, List, Tuple

from services.models import Job

COMMON_TAGS = (
    'Corte',
    'Color',
    'Mechas',
    'Balayage',
    'Brushing',
    'Peinado',
    'Tratamiento',
    'Alisado',
    'Permanente',
    'Tintura',
    'Decoloración',
    'Reflejos',
    'Rulos',
    'Planchado',
    'Keratina',
)


def get_all_tags_from_jobs(jobs: Iterable[Job]) -> List[str]:
    """Get every tag used on ``jobs``, sorted."""
    return sorted({tag for job in jobs for tag in job.tags})


def get_most_used_tags(jobs: Iterable[Job], limit: int = 10) -> List[Tuple[str, int]]:
    """Get (tag, count) pairs, most used first, ties alphabetical."""
    counts = Counter(tag for job in jobs for tag in job.tags)
    return sorted(counts.items(), key=lambda item: (-item[1], item[0]))[:limit]
