import base64
import os

import streamlit as st
import requests

from rice_classifier import lookup_disease_info, format_confidence

st.set_page_config(page_title="Rice Leaf Disease Detector", page_icon="🌾")

st.title("🌾 Rice Leaf Disease Detector")

# Config
API_URL = os.getenv("API_URL", "http://localhost:8000")

SEVERITY_BADGE = {"low": "🟢 Low", "medium": "🟡 Medium", "high": "🔴 High"}

# Input
uploaded = st.file_uploader("Upload a photo of a rice leaf", type=["png", "jpg", "jpeg", "webp"])

if uploaded is not None:
    st.image(uploaded, caption=uploaded.name, width="stretch")

# Predict button
if st.button("Analyze", type="primary"):
    if uploaded is not None:
        with st.spinner("Analyzing... (the first request may take a while if the model is waking up)"):
            try:
                response = requests.post(
                    f"{API_URL}/classify",
                    json={
                        "image": base64.b64encode(uploaded.getvalue()).decode("ascii"),
                        "mime_type": uploaded.type or "image/jpeg",
                    },
                    timeout=180
                )
                result = response.json()

                if result.get("status") == "success":
                    top = result["top_prediction"]
                    info = result.get("disease_info") or lookup_disease_info(top["label"]).model_dump()

                    # Resultado
                    st.success(f"**{info['name']}** ({format_confidence(top['score'])} confidence)")
                    st.write(f"**Severity:** {SEVERITY_BADGE[info['severity']]}")
                    st.write(f"**Description:** {info['description']}")
                    st.write(f"**Treatment:** {info['treatment']}")

                    # Probabilidades
                    st.write("**All predictions:**")
                    for prediction in result["all_predictions"]:
                        st.progress(
                            min(max(prediction["score"], 0.0), 1.0),
                            text=f"{prediction['label']}: {format_confidence(prediction['score'])}",
                        )

                    with st.expander("Raw response"):
                        st.code(result.get("raw_text") or "")
                else:
                    st.error(result.get("error") or result.get("detail") or f"Erro: {response.status_code}")

            except Exception as e:
                st.error(f"Erro: {e}")
    else:
        st.warning("Upload an image first!")
