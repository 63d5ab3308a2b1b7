"""
MimuCare - Dr. Mimu Health Assistant Demo

Interactive Gradio demo for the bilingual (Bengali/English) health assistant.

Features:
- Chat with Dr. Mimu (answers combined from every configured AI provider)
- Medication reminders detected from chat messages
- Symptom checker with follow-up questions, likely conditions,
  recommended tests, lifestyle advice and specialist routing

Run locally:
    python app/demo.py

Or in a notebook:
    from app.demo import create_demo
    demo = create_demo()
    demo.launch()
"""

import gradio as gr
import sys
from pathlib import Path
from typing import List

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from mimucare.agents.catalog import Duration, SelectedSymptom, all_symptoms
from mimucare.agents.medication import completion_status, medication_summary
from mimucare.locale import SUPPORTED_LOCALES, t

_assistant = None


def get_assistant():
    """Lazy load the Dr. Mimu assistant."""
    global _assistant
    if _assistant is None:
        from mimucare import HealthAssistant, configure_logging
        configure_logging()
        print("Loading Dr. Mimu...")
        _assistant = HealthAssistant()
        providers = _assistant.registry.available_providers()
        print(f"Assistant ready! Providers: {', '.join(providers) or 'none'}")
    return _assistant


def symptom_choices(locale: str = "en") -> list:
    return [(s.display_name(locale), s.id) for s in all_symptoms()]


def duration_choices(locale: str = "en") -> list:
    return [(t(f"duration.{d.value}", locale), d.value) for d in Duration]


def relabel_pickers(locale: str) -> tuple:
    """Relabel the symptom and duration pickers in the chosen language."""
    return (
        gr.update(choices=symptom_choices(locale)),
        gr.update(choices=duration_choices(locale)),
    )


def parse_overrides(text: str) -> dict:
    """Parse "symptom:intensity" pairs separated by commas or new lines."""
    overrides = {}
    for item in (text or "").replace("\n", ",").split(","):
        item = item.strip()
        if not item:
            continue
        symptom_id, _, value = item.partition(":")
        overrides[symptom_id.strip()] = int(value)
    return overrides


def build_selection(
    symptom_ids: List[str],
    duration: str,
    intensity: float,
    overrides: str,
) -> List[SelectedSymptom]:
    levels = parse_overrides(overrides)
    return [
        SelectedSymptom(sid, duration, levels.get(sid, int(intensity)))
        for sid in symptom_ids
    ]


# =============================================================================
# Handlers
# =============================================================================

async def chat_handler(message: str, locale: str, user_id: str) -> tuple:
    """Send a chat message to Dr. Mimu."""
    if not message or not message.strip():
        return "Please enter a message.", ""

    assistant = get_assistant()
    user_id = (user_id or "").strip() or "guest"

    try:
        reply = await assistant.chat(message, locale=locale, user_id=user_id)
    except Exception as e:
        return f"Error: {str(e)}", ""

    return reply.text, format_schedules(user_id, locale)


def format_schedules(user_id: str, locale: str) -> str:
    schedules = get_assistant().medication_schedules(user_id)
    if not schedules:
        return ""

    lines = ["**Medication Reminders:**\n"]
    for schedule in schedules:
        status = completion_status(schedule)
        lines.append(
            f"- {medication_summary(schedule.medication, locale)} "
            f"({status['taken_doses']}/{status['total_doses']})"
        )
    return "\n".join(lines)


def questions_handler(symptom_ids: List[str], locale: str) -> str:
    """Preview the follow-up questions for the chosen symptoms."""
    if not symptom_ids:
        return "Select at least one symptom."

    questionnaire = get_assistant().build_questionnaire(
        [SelectedSymptom(sid, Duration.TODAY, 5) for sid in symptom_ids], locale=locale,
    )
    lines = []
    for i, question in enumerate(questionnaire.questions, 1):
        marker = "" if question.required else " *(optional)*"
        lines.append(f"**{i}. {question.text}**{marker}")
        if question.options:
            lines.append("   " + " / ".join(question.options))
    return "\n".join(lines)


async def assess_handler(
    symptom_ids: List[str],
    duration: str,
    intensity: float,
    overrides: str,
    locale: str,
    narrate: bool,
) -> str:
    """Run the symptom assessment and format the report."""
    if not symptom_ids:
        return "Please select at least one symptom."

    try:
        selected = build_selection(symptom_ids, duration, intensity, overrides)
    except ValueError as e:
        return f"Invalid input: {str(e)}"

    assistant = get_assistant()
    try:
        result = assistant.assess(selected, locale=locale)
        if narrate:
            await assistant.narrate(result)
    except Exception as e:
        return f"Error running assessment: {str(e)}"

    return result.to_report()


# =============================================================================
# Interface
# =============================================================================

def create_demo():
    """Create the Gradio demo interface."""

    with gr.Blocks(title="MimuCare - Dr. Mimu Health Assistant") as demo:

        gr.Markdown("""
        # MimuCare: Dr. Mimu Health Assistant

        Bilingual (বাংলা / English) health guidance combining several AI providers
        with rule-based symptom assessment and specialist routing.

        > **Disclaimer:** Dr. Mimu provides general information only and does not
        > replace a qualified healthcare professional. In an emergency, seek care immediately.
        """)

        with gr.Tabs():
            with gr.TabItem("Chat"):
                with gr.Row():
                    with gr.Column(scale=1):
                        chat_input = gr.Textbox(
                            label="Message",
                            placeholder="e.g., I have had a fever since yesterday",
                            lines=3,
                        )
                        chat_locale = gr.Radio(
                            choices=list(SUPPORTED_LOCALES),
                            value="bn",
                            label="Language",
                        )
                        chat_user = gr.Textbox(label="User ID", value="guest")
                        chat_btn = gr.Button("Ask Dr. Mimu", variant="primary")

                        gr.Examples(
                            examples=[
                                ["What should I eat when I have a fever?", "en", "guest"],
                                ["Set a reminder for Napa 500mg twice daily for 5 days", "en", "guest"],
                                ["ওষুধ: Napa দিনে তিনবার ৩ দিন রিমাইন্ডার সেট করুন", "bn", "guest"],
                            ],
                            inputs=[chat_input, chat_locale, chat_user],
                        )

                    with gr.Column(scale=1):
                        chat_output = gr.Markdown(label="Dr. Mimu")
                        schedule_output = gr.Markdown()

                chat_btn.click(
                    chat_handler,
                    inputs=[chat_input, chat_locale, chat_user],
                    outputs=[chat_output, schedule_output],
                )

            with gr.TabItem("Symptom Checker"):
                with gr.Row():
                    with gr.Column(scale=1):
                        symptoms = gr.CheckboxGroup(
                            choices=symptom_choices("en"),
                            label="Symptoms",
                        )
                        duration = gr.Dropdown(
                            choices=duration_choices("en"),
                            value=Duration.FEW_DAYS.value,
                            label="Duration",
                        )
                        intensity = gr.Slider(
                            minimum=1, maximum=10, step=1, value=5,
                            label="Intensity (1-10)",
                        )
                        with gr.Accordion("Per-symptom intensity", open=False):
                            overrides = gr.Textbox(
                                label="Overrides",
                                placeholder="e.g., chest-pain:9, headache:4",
                            )
                        symptom_locale = gr.Radio(
                            choices=list(SUPPORTED_LOCALES),
                            value="en",
                            label="Language",
                        )
                        narrate = gr.Checkbox(label="Add AI explanation", value=False)
                        with gr.Row():
                            questions_btn = gr.Button("Show Questions")
                            assess_btn = gr.Button("Assess", variant="primary")

                    with gr.Column(scale=1):
                        questions_output = gr.Markdown()
                        report_output = gr.Textbox(label="Assessment Report", lines=25)

                symptom_locale.change(
                    relabel_pickers,
                    inputs=[symptom_locale],
                    outputs=[symptoms, duration],
                )
                questions_btn.click(
                    questions_handler,
                    inputs=[symptoms, symptom_locale],
                    outputs=[questions_output],
                )
                assess_btn.click(
                    assess_handler,
                    inputs=[symptoms, duration, intensity, overrides, symptom_locale, narrate],
                    outputs=[report_output],
                )

        gr.Markdown("""
        ---
        **About This Demo**

        Answers come from Gemini, OpenAI GPT and DeepSeek when their API keys are set
        (see `.env`). The symptom assessment itself is rule-based and works offline.
        """)

    return demo


# =============================================================================
# Main Entry Point
# =============================================================================

if __name__ == "__main__":
    demo = create_demo()
    demo.launch(
        share=False,
        server_name="0.0.0.0",
        server_port=7860,
        show_error=True,
    )
