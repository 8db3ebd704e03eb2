import asyncio
from datetime import time, timedelta

from conftest import NOW, FakeSampleStore, days_ago

from progress_companion.core.enums import MetricType
from progress_companion.services.evolution import build_evolution, evolution_buckets, evolution_span, load_evolution
from progress_companion.services.records import Sample


def test_twelve_contiguous_buckets_oldest_first():
    buckets = evolution_buckets(NOW)
    assert len(buckets) == 12
    for earlier, later in zip(buckets, buckets[1:]):
        assert earlier.end == later.start
        assert earlier.start < later.start
    assert buckets[-1].end.date() == NOW.date()
    assert buckets[-1].end.time() == time.max
    assert buckets[0].start.time() == time.min


def test_span_covers_all_buckets():
    span = evolution_span(NOW)
    assert span.start == evolution_buckets(NOW)[0].start
    assert span.end == evolution_buckets(NOW)[-1].end


def test_empty_data_gives_twelve_empty_points():
    points = build_evolution({}, NOW)
    assert len(points) == 12
    assert all(p.weight is None and p.body_fat is None and p.lean_mass is None for p in points)
    assert points[-1].month == NOW
    assert points[0].month == NOW - timedelta(days=330)


def test_latest_sample_per_bucket_wins():
    samples = {
        MetricType.WEIGHT: [
            Sample(MetricType.WEIGHT, 80.0, days_ago(3)),
            Sample(MetricType.WEIGHT, 78.0, days_ago(1)),
            Sample(MetricType.WEIGHT, 82.0, days_ago(45)),
        ],
        MetricType.BODY_FAT: [Sample(MetricType.BODY_FAT, 19.5, days_ago(2), unit="%")],
    }
    points = build_evolution(samples, NOW)
    assert points[-1].weight == 78.0
    assert points[-1].body_fat == 19.5
    assert points[-2].weight == 82.0
    assert points[-3].weight is None


def test_load_evolution_fetches_each_metric(ctx, weight_samples):
    store = FakeSampleStore(samples=weight_samples)
    points = asyncio.run(load_evolution(store, ctx))
    assert len(points) == 12
    assert points[-1].weight == 78.0
    assert sorted(m.value for _, m in store.calls) == ["body_fat", "lean_mass", "weight"]
