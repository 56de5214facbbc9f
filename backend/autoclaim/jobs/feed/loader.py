from sqlalchemy import func, literal_column
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from autoclaim.jobs.feed.types import FeedTrip
from autoclaim.models.trains import Train


def load_trips(db: Session, trips: list[FeedTrip]) -> dict:
    """
    Upsert feed trips into trains on (trip_id, service_date). A trip id has no
    year, so the same train and day next year is a new row.
    Schedules are overwritten with the latest feed values; a message without
    actuals never erases actuals already stored.
    """
    inserted = 0
    updated = 0

    for i, trip in enumerate(trips, start=1):
        stmt = insert(Train).values(
            trip_id=trip.trip_id,
            train_number=trip.train_number,
            service_date=trip.service_date,
            scheduled_departure=trip.scheduled_departure,
            scheduled_arrival=trip.scheduled_arrival,
            actual_arrival=trip.actual_arrival,
            delay_minutes=trip.delay_minutes,
        )
        stmt = stmt.on_conflict_do_update(
            constraint="uq_trains_trip_service_date",
            set_={
                "train_number": stmt.excluded.train_number,
                "scheduled_departure": stmt.excluded.scheduled_departure,
                "scheduled_arrival": stmt.excluded.scheduled_arrival,
                "actual_arrival": func.coalesce(stmt.excluded.actual_arrival, Train.actual_arrival),
                "delay_minutes": func.coalesce(stmt.excluded.delay_minutes, Train.delay_minutes),
                "updated_at": func.now(),
            },
        ).returning(literal_column("(xmax = 0)").label("inserted"))

        # xmax is 0 only for a freshly inserted row
        row = db.execute(stmt).fetchone()
        if row is not None and row.inserted:
            inserted += 1
        else:
            updated += 1

        # batch commits to keep memory small and speed stable
        if i % 1000 == 0:
            db.commit()

    db.commit()
    return {"total": len(trips), "inserted": inserted, "updated": updated}
