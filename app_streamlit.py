import logging

import pandas as pd
import requests
import streamlit as st

from body_component import body_model
from body_view import BodyView
from config import get_settings
from logging_config import setup_logging
from picking import InvalidCameraState
from symptom_catalog import MOCK_CONDITIONS, filter_symptoms, symptoms_by_ids
from wizard import (STEPS, PatientInfo, Step, SymptomList, can_proceed, compose_symptom_text,
                    next_step, previous_step)

settings = get_settings()
setup_logging(settings.log_level_number, settings.log_file)
logger = logging.getLogger("symptom_checker.ui")

API_ANALYZE = settings.backend_url.rstrip("/") + "/api/analyze-symptoms"

st.set_page_config(page_title="SymptomTrack", page_icon="🏥", layout="wide")


def _init_state():
    defaults = {
        "step": Step.INFO,
        "patient": PatientInfo(),
        "symptoms": SymptomList(),
        "body_part": None,
        "last_click": None,
        "camera": None,
        "analysis": None,
        "analysis_error": None,
        "selected_condition": None,
    }
    for k, v in defaults.items():
        if k not in st.session_state:
            st.session_state[k] = v


def _start_over():
    for k in list(st.session_state.keys()):
        del st.session_state[k]
    _init_state()


def _select_part(label: str):
    st.session_state.body_part = label


def _request_analysis(text: str):
    st.session_state.analysis = None
    st.session_state.analysis_error = None
    try:
        resp = requests.post(API_ANALYZE, json={"symptoms": text}, timeout=settings.openai_timeout + 15)
        data = resp.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning("Analysis request failed: %s", e)
        st.session_state.analysis_error = f"Connection error: {e}"
        return
    if resp.status_code == 200:
        st.session_state.analysis = data["analysis"]
    else:
        st.session_state.analysis_error = data.get("error", f"Backend error {resp.status_code}")


def render_progress():
    current = st.session_state.step
    labels = [f"**:blue[{s.value}]**" if s == current else s.value for s in STEPS]
    st.markdown("  ›  ".join(labels))


def render_info():
    st.title("🏥 SymptomTrack")
    st.info("This tool is for informational purposes only and is not a substitute for professional medical advice.")
    patient: PatientInfo = st.session_state.patient
    age = st.number_input("Age", min_value=0, max_value=120, value=patient.age, placeholder="Enter your age")
    genders = ["male", "female"]
    gender = st.radio("Gender", genders, index=genders.index(patient.gender) if patient.gender else None,
                      format_func=str.capitalize, horizontal=True)
    st.session_state.patient = PatientInfo(age=age, gender=gender)


def render_symptoms():
    symptoms: SymptomList = st.session_state.symptoms
    col_text, col_body = st.columns(2)

    with col_body:
        # keep the orbit the user last clicked from across reruns
        with BodyView(on_part_selected=_select_part, camera=st.session_state.camera) as view:
            event = body_model(view.render_payload(), selected=st.session_state.body_part, key="body_model")
            # the component keeps returning its last value on every rerun
            if event and event.get("nonce") != st.session_state.last_click:
                st.session_state.last_click = event.get("nonce")
                try:
                    label = view.handle_event(event)
                except InvalidCameraState as e:
                    logger.error("Renderer reported an unusable camera: %s", e)
                    st.error("The 3D view reported an invalid camera; reload the page.")
                else:
                    st.session_state.camera = view.camera
                    if label is None:
                        st.caption("No body part under the pointer.")
                    else:
                        # redraw with the new part highlighted
                        st.rerun()

    with col_text:
        main = st.text_input("Main Symptom", placeholder="Type your main symptom here")
        if st.button("Add", disabled=not main.strip()):
            symptoms.add(main)

        part = st.session_state.body_part
        if part:
            with st.expander(f"Select Symptoms for {part}", expanded=True):
                search = st.text_input("Search symptoms...", key="symptom_search")
                common_only = st.toggle("Common symptoms only", key="common_only")
                chosen = []
                for s in filter_symptoms(search, common_only):
                    tag = " · *Common*" if s.is_common else ""
                    if st.checkbox(f"{s.name}{tag}", key=f"symptom_{part}_{s.id}"):
                        chosen.append(s.id)
                if st.button("Add Selected Symptoms", disabled=not chosen):
                    for name in symptoms_by_ids(chosen):
                        symptoms.add(f"{name} ({part})")

        st.subheader("Selected Symptoms")
        if not len(symptoms):
            st.caption("No symptoms added yet")
        for i, item in enumerate(list(symptoms.items)):
            c1, c2 = st.columns([4, 1])
            c1.write(item)
            if c2.button("Remove", key=f"remove_{i}"):
                symptoms.remove(i)
                st.rerun()


def render_conditions():
    patient: PatientInfo = st.session_state.patient
    symptoms: SymptomList = st.session_state.symptoms
    main, side = st.columns([2, 1])

    with side:
        st.subheader("User Information")
        st.write(f"Age: **{patient.age}**")
        st.write(f"Gender: **{(patient.gender or '').capitalize()}**")
        st.subheader("Selected Symptoms")
        for item in symptoms.items:
            st.write("•", item)
        if st.button("Edit Symptoms"):
            st.session_state.step = Step.SYMPTOMS
            st.rerun()

    with main:
        head, reset = st.columns([4, 1])
        head.subheader("Possible Conditions")
        if reset.button("Start Over"):
            _start_over()
            st.rerun()

        if st.session_state.analysis is None and st.session_state.analysis_error is None:
            with st.spinner("Analyzing..."):
                _request_analysis(compose_symptom_text(patient, symptoms, st.session_state.body_part))

        if st.session_state.analysis_error:
            st.error(st.session_state.analysis_error)
            if st.button("Try Again"):
                st.session_state.analysis_error = None
                st.rerun()
        elif st.session_state.analysis:
            st.markdown("#### 🔎 Analysis")
            st.markdown(st.session_state.analysis)

        df = pd.DataFrame([c._asdict() for c in MOCK_CONDITIONS]).set_index("id")
        df["confidence"] = df["confidence"].map(lambda v: f"{v}% match")
        st.dataframe(df, use_container_width=True)
        names = [c.name for c in MOCK_CONDITIONS]
        st.session_state.selected_condition = st.radio("Select a condition to continue", names, index=None)


def render_details():
    name = st.session_state.selected_condition
    condition = next((c for c in MOCK_CONDITIONS if c.name == name), None)
    if condition is None:
        st.warning("Select a condition first.")
        return
    st.subheader(condition.name)
    st.progress(condition.confidence / 100, text=f"{condition.confidence}% match")
    st.write(condition.description)


def render_treatment():
    st.subheader("🩺 Next Steps")
    if st.session_state.analysis:
        st.markdown(st.session_state.analysis)
    st.caption("Educational only. Not medical advice. If symptoms are severe, seek emergency care.")


RENDERERS = {
    Step.INFO: render_info,
    Step.SYMPTOMS: render_symptoms,
    Step.CONDITIONS: render_conditions,
    Step.DETAILS: render_details,
    Step.TREATMENT: render_treatment,
}


def main():
    _init_state()
    render_progress()
    step = st.session_state.step
    RENDERERS[step]()

    ready = can_proceed(step, st.session_state.patient, st.session_state.symptoms)
    if step == Step.CONDITIONS:
        ready = ready and st.session_state.selected_condition is not None

    back, forward = st.columns(2)
    if back.button("Previous", disabled=step == STEPS[0]):
        st.session_state.step = previous_step(step)
        st.rerun()
    if forward.button("Continue", disabled=not ready):
        if step == Step.SYMPTOMS:
            # fresh analysis for the current symptom list
            st.session_state.analysis = None
            st.session_state.analysis_error = None
        st.session_state.step = next_step(step)
        st.rerun()


main()
