"""
scripts/predict.py
Generate a prediction from a JSONL draw file (or URL), or check a saved
prediction against the newest draw.

  python scripts/predict.py --lottery power_655 --source data/power655.jsonl --save pred.json
  python scripts/predict.py --lottery power_655 --source data/power655.jsonl --check pred.json
"""
from __future__ import annotations

import argparse
import json
import sys
import uuid
from datetime import date
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.crawlers.draw_source import JsonlDrawSource
from src.models.records import PredictionRecord
from src.pipeline.accuracy_tracker import AccuracyTracker
from src.pipeline.prediction_generator import generate_prediction
from src.pipeline.result_checker import check_result
from src.utils.config import ACCURACY_HISTORY_PATH, LOTTERY_CONFIG_FILES, get_model_config
from src.utils.history_store import JsonFileHistoryStore
from src.utils.logger import get_logger

log = get_logger("predict")


def _save_prediction(path: Path, record: PredictionRecord) -> None:
    payload = {
        "prediction_id": record.prediction_id,
        "prediction_date": record.prediction_date.isoformat(),
        "lottery_type": record.lottery_type,
        "numbers": list(record.numbers),
        "special_number": record.special_number,
    }
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    log.info(f"Prediction saved → {path}")


def _load_prediction(path: Path) -> PredictionRecord:
    data = json.loads(path.read_text(encoding="utf-8"))
    return PredictionRecord(
        prediction_id=data["prediction_id"],
        prediction_date=date.fromisoformat(data["prediction_date"]),
        lottery_type=data["lottery_type"],
        numbers=tuple(data["numbers"]),
        special_number=data.get("special_number"),
    )


def main():
    parser = argparse.ArgumentParser(description="Vietlott ensemble prediction")
    parser.add_argument("--lottery", choices=list(LOTTERY_CONFIG_FILES), default="power_655")
    parser.add_argument("--source", required=True, help="JSONL path or URL")
    parser.add_argument("--limit", type=int, default=200, help="Newest draws to analyze")
    parser.add_argument("--history", default=ACCURACY_HISTORY_PATH, help="Accuracy history JSON file")
    parser.add_argument("--save", help="Write the generated prediction to this file")
    parser.add_argument("--check", help="Compare this saved prediction with the newest draw")
    args = parser.parse_args()

    draws = JsonlDrawSource(args.lottery, args.source).fetch_draws(limit=args.limit)
    store = JsonFileHistoryStore(args.history)
    max_history = get_model_config(args.lottery).get("accuracy", {}).get("max_history", 100)

    if args.check:
        if not draws:
            log.error("No draws available to check against.")
            sys.exit(1)
        result = check_result(_load_prediction(Path(args.check)), draws[0], AccuracyTracker(store, max_history=max_history))
        print(json.dumps(result, ensure_ascii=False, indent=2))
        return

    prediction = generate_prediction(args.lottery, draws, store)
    print(json.dumps({
        "numbers": list(prediction.numbers),
        "special_number": prediction.special_number,
        "confidence": round(prediction.confidence, 3),
        "methodology": list(prediction.methodology),
        "insights": list(prediction.insights),
    }, ensure_ascii=False, indent=2))

    if args.save:
        record = PredictionRecord.from_candidate(prediction, uuid.uuid4().hex, args.lottery)
        _save_prediction(Path(args.save), record)


if __name__ == "__main__":
    main()
