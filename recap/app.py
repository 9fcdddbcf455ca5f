"""
HTTP entry point.

``POST /summarise`` with a JSON body such as::

    {"speakers": [{"speaker": "Hero", "path": "input/user1.flac"},
                  {"speaker": "GameMaster", "path": "input/user2.flac"}]}

runs the pipeline and answers with the transcript, the number of chunks
sent to the model and the summary.  A recording in which nobody said
anything is answered with ``422``.
"""

import json
import logging
import os

from flask import Flask, jsonify, request

from . import pipeline
from .config import RecapConfig
from .errors import NothingToSummarizeError
from .transcription import SpeakerAudio

logging.basicConfig(level=logging.INFO, format="%(message)s")

app = Flask(__name__)


def _parse_speakers(data):
    speakers = data.get("speakers") if isinstance(data, dict) else None
    if not isinstance(speakers, list) or not speakers:
        return None
    requests = []
    for entry in speakers:
        if not isinstance(entry, dict) or not entry.get("speaker") or not entry.get("path"):
            return None
        requests.append(SpeakerAudio(str(entry["speaker"]), str(entry["path"])))
    return requests


@app.route("/summarise", methods=["POST"])
def summarise():
    requests = _parse_speakers(request.get_json(silent=True))
    if requests is None:
        logging.info(json.dumps({"event": "bad_request"}))
        return jsonify(error="Expected a non-empty 'speakers' list of {speaker, path}"), 400
    logging.info(json.dumps({"event": "request", "speakers": [r.speaker_id for r in requests]}))

    try:
        config = app.config.get("RECAP_CONFIG") or RecapConfig.from_env()
        result = pipeline.run(requests, config)
    except NothingToSummarizeError:
        logging.info(json.dumps({"event": "empty_conversation"}))
        return jsonify(error="No conversation detected, nothing to summarise"), 422
    except Exception as exc:
        logging.exception("Error in /summarise")
        return jsonify(error=f"Server error: {exc}"), 500

    logging.info(json.dumps({"event": "summary_created", "turns": len(result.turns), "chunks": len(result.chunks)}))
    return jsonify(transcript=result.transcript, chunks=len(result.chunks), summary=result.summary), 200


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.environ.get("PORT", 8080)))
