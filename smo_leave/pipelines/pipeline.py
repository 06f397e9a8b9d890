"""Main orchestration pipeline for the SMO leave report."""
import logging
import time
from datetime import date, datetime
from typing import Optional

from sqlalchemy.engine import Engine

from smo_leave.utilities import utils
from smo_leave.utilities.models import ExtractionConfig, OutputDocument
from smo_leave.extractors import database, query_builder
from smo_leave.transformers import aggregator, row_mapper
from smo_leave.loaders import report_writer

logger = logging.getLogger(__name__)


def extract_report(
    cfg: ExtractionConfig,
    engine: Engine,
    today: Optional[date] = None,
    generated_at: Optional[datetime] = None,
) -> OutputDocument:
    """
    Query, map and aggregate leave for qualifying SMOs.

    Nothing is written here; a failure leaves no output behind.

    Args:
        cfg: Validated run configuration
        engine: Database engine
        today: First day of the window (defaults to the current date)
        generated_at: Run timestamp for the metadata

    Returns:
        OutputDocument ready to be written

    Raises:
        database.ExtractionError: On connection or query failure
    """
    window = utils.create_date_window(cfg.months_ahead, today)
    logger.info("Date range: %s", window.description)

    leave_query = query_builder.build_leave_query(cfg, window)
    smo_query = query_builder.build_smo_query(cfg)

    with database.open_connection(engine) as connection:
        logger.info("Fetching SMO shift counts...")
        shift_counts = database.fetch_smo_shift_counts(connection, smo_query)
        logger.info("Found %d qualifying SMOs", len(shift_counts))

        logger.info("Fetching leave requests...")
        result = row_mapper.map_rows(database.stream_rows(connection, leave_query))

    smo_employees = row_mapper.index_smo_employees(result.records, shift_counts)
    summaries = aggregator.summarize_staff(result.records, cfg.leave_day_policy)

    return report_writer.build_document(
        cfg,
        window,
        result,
        summaries,
        smo_employees=smo_employees,
        data_source=database.describe_data_source(cfg.db_url),
        generated_at=generated_at,
    )


def run_extraction(
    cfg: ExtractionConfig,
    today: Optional[date] = None,
    engine: Optional[Engine] = None,
) -> OutputDocument:
    """
    Run the complete extraction: query, aggregate, write, summarize.

    Args:
        cfg: Run configuration (validated here)
        today: First day of the window (defaults to the current date)
        engine: Existing engine; one is created from cfg.db_url if omitted

    Returns:
        The written OutputDocument
    """
    cfg.validate()

    logger.info("=" * 70)
    logger.info("STARTING SMO LEAVE EXTRACTION")
    logger.info("Database: %s", database.mask_url(cfg.db_url))
    logger.info(
        "Months ahead: %d | Include pending: %s | Qualification: %s | Policy: %s",
        cfg.months_ahead,
        cfg.include_pending,
        cfg.qualification,
        cfg.leave_day_policy,
    )
    logger.info("=" * 70)

    start_time = time.time()

    owns_engine = engine is None
    if owns_engine:
        logger.info("Connecting to database...")
        engine = database.create_db_engine(cfg.db_url, cfg.query_timeout)
        logger.info("✓ Database connection established successfully")

    try:
        document = extract_report(cfg, engine, today=today)
    finally:
        if owns_engine:
            engine.dispose()
            logger.debug("Database engine disposed")

    if document.metadata["skipped_rows"]:
        logger.warning(
            "⚠ %d row(s) could not be decoded and were skipped",
            document.metadata["skipped_rows"],
        )

    report_writer.write_document(document, cfg.output_path)
    report_writer.print_console_summary(document, cfg.top_n)

    elapsed_time = time.time() - start_time
    logger.info("=" * 70)
    logger.info(
        "EXTRACTION COMPLETE - %d records, %d staff, %.2f seconds",
        document.metadata["record_count"],
        document.metadata["staff_count"],
        elapsed_time,
    )
    logger.info("=" * 70)
    return document
