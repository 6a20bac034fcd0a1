# app.py - Flask backend
import logging
from typing import Optional

from flask import Flask, jsonify, request
from pydantic import ValidationError

import llm_wrapper
from body_scene import build_scene
from config import Settings, get_settings
from logging_config import setup_logging
from picking import Camera, InvalidCameraState, normalize_pointer, resolve_pick
from pydantic_models import AnalysisResponse, ErrorResponse, PickRequest, PickResponse, SymptomRequest

logger = logging.getLogger("symptom_checker.api")


def _error(message: str, status: int):
    return jsonify(ErrorResponse(error=message).model_dump()), status


def _validation_message(e: ValidationError) -> str:
    msg = e.errors()[0]["msg"]
    # pydantic prefixes custom validator messages
    return msg.removeprefix("Value error, ")


def create_app(settings: Optional[Settings] = None) -> Flask:
    settings = settings or get_settings()
    setup_logging(settings.log_level_number, settings.log_file)
    app = Flask(__name__)
    app.config["SETTINGS"] = settings

    # built once per process; scenes are immutable values
    scene = build_scene()

    @app.route("/", methods=["GET"])
    def index():
        return ("Healthcare Symptom Checker: POST /api/analyze-symptoms with {'symptoms':'...'}, "
                "GET /api/body-scene, POST /api/body-pick")

    @app.route("/api/analyze-symptoms", methods=["POST"])
    def analyze():
        data = request.get_json(force=True, silent=True)
        if not isinstance(data, dict) or not isinstance(data.get("symptoms"), str):
            return _error("Symptoms are required", 400)
        try:
            body = SymptomRequest(**data)
        except ValidationError as e:
            return _error(_validation_message(e), 400)

        try:
            analysis = llm_wrapper.analyze_symptoms(body.symptoms, settings=app.config["SETTINGS"])
        except llm_wrapper.EmptySymptomsError as e:
            return _error(str(e), 400)
        except llm_wrapper.MissingApiKeyError as e:
            logger.error("OpenAI API key is missing")
            return _error(str(e), 500)
        except llm_wrapper.AnalysisError as e:
            return _error(str(e), 500)
        return jsonify(AnalysisResponse(analysis=analysis).model_dump())

    @app.route("/api/body-scene", methods=["GET"])
    def body_scene():
        payload = scene.to_payload()
        payload["camera"] = Camera().model_dump(mode="json")
        return jsonify(payload)

    @app.route("/api/body-pick", methods=["POST"])
    def body_pick():
        data = request.get_json(force=True, silent=True)
        if not isinstance(data, dict):
            return _error("Please POST a JSON object.", 400)
        try:
            pick = PickRequest(**data)
        except ValidationError as e:
            return _error(_validation_message(e), 400)

        if pick.ndc_x is not None:
            ndc_x, ndc_y = pick.ndc_x, pick.ndc_y
        else:
            ndc_x, ndc_y = normalize_pointer(pick.x, pick.y, pick.width, pick.height)

        try:
            camera = Camera.from_payload(pick.camera) if pick.camera else Camera()
            label = resolve_pick(ndc_x, ndc_y, camera, scene)
        except InvalidCameraState as e:
            logger.warning("Rejected pick with invalid camera: %s", e)
            return _error(str(e), 422)
        return jsonify(PickResponse(label=label).model_dump())

    return app


app = create_app()

if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000)
