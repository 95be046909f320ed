"""Streamlit frontend for the Prompt Template Manager.

Provides a UI for managing prompt templates, filling in their dynamic
fields, and enhancing the rendered prompt through an upstream model.
"""

import logging
import os
from pathlib import Path
from typing import Any

import httpx
import streamlit as st

from promptforge.core.preferences import DEFAULT_PREFERENCES_PATH, PreferencesRepository, UserPreferences
from promptforge.strategies.template_engine import (
    CATEGORIES,
    DEFAULT_INSTRUCTION_TABLES,
    Domain,
    GatewayProvider,
    InstructionOverrides,
    Methodology,
    ModelType,
    ProviderType,
    RoleType,
    TemplateAttributes,
    build_enhancement_request,
    derive_dynamic_fields,
    fields_to_mapping,
    render_template,
)

# Configuration
API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")
PREFERENCES_PATH = Path(os.getenv("PREFERENCES_PATH", str(DEFAULT_PREFERENCES_PATH))).expanduser()

# Page config
st.set_page_config(
    page_title="Prompt Template Manager",
    page_icon="🪄",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

ALL_DOMAINS = "All domains"


# =============================================================================
# API Client
# =============================================================================


class PromptForgeClient:
    """Synchronous API client for the Streamlit frontend."""

    def __init__(self, base_url: str, timeout: float = 10.0):
        """Initialize the API client.

        Args:
            base_url: Base URL of the API.
            timeout: Timeout for non-enhancement requests, in seconds.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _request(
        self,
        method: str,
        path: str,
        *,
        api_key: str | None = None,
        timeout: float | None = None,
        **kwargs: Any,
    ) -> Any:
        headers = {"X-API-Key": api_key} if api_key else {}
        try:
            response = httpx.request(
                method,
                f"{self.base_url}{path}",
                headers=headers,
                timeout=timeout or self.timeout,
                **kwargs,
            )
            response.raise_for_status()
            if response.status_code == 204:
                return {}
            return response.json()
        except httpx.HTTPStatusError as e:
            detail = _error_detail(e.response)
            logger.error(f"{method} {path} failed: {e.response.status_code} - {detail}")
            st.error(f"Request failed ({e.response.status_code}): {detail}")
            return None
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} error: {e}")
            st.error(f"Could not reach the API: {e}")
            return None

    def health_check(self) -> bool:
        """Check if the API is healthy."""
        try:
            response = httpx.get(f"{self.base_url}/health", timeout=5.0)
            return response.status_code == 200
        except httpx.HTTPError:
            return False

    def list_templates(self, domain: str | None = None) -> list[dict[str, Any]]:
        """Fetch templates in stored order, optionally for one domain."""
        params = {"domain": domain} if domain else None
        data = self._request("GET", "/api/templates", params=params)
        return data.get("templates", []) if data else []

    def create_template(self, payload: dict[str, Any]) -> dict[str, Any] | None:
        return self._request("POST", "/api/templates", json=payload)

    def update_template(self, template_id: int, payload: dict[str, Any]) -> dict[str, Any] | None:
        return self._request("PUT", f"/api/templates/{template_id}", json=payload)

    def delete_template(self, template_id: int) -> bool:
        return self._request("DELETE", f"/api/templates/{template_id}") is not None

    def reorder_templates(self, items: list[dict[str, int]]) -> list[dict[str, Any]]:
        data = self._request("POST", "/api/templates/reorder", json=items)
        return data.get("templates", []) if data else []

    def enhance_template(
        self,
        template_id: int,
        fields: dict[str, str],
        preferences: UserPreferences,
    ) -> dict[str, Any] | None:
        """Render a stored template and enhance it with the user's settings."""
        overrides = preferences.instruction_overrides
        payload = {
            "fields": fields,
            "provider": preferences.selected_provider.value,
            "model": preferences.selected_model,
            "custom_instruction": preferences.custom_instruction or None,
            "instruction_overrides": None if overrides.is_empty() else overrides.model_dump(mode="json"),
        }
        return self._request(
            "POST",
            f"/api/templates/{template_id}/enhance",
            api_key=preferences.api_key_for(),
            timeout=90.0,
            json=payload,
        )

    def list_models(self, provider: GatewayProvider, api_key: str | None) -> list[dict[str, Any]]:
        data = self._request(
            "GET",
            "/api/enhance/models",
            api_key=api_key,
            params={"provider": provider.value},
        )
        return data.get("models", []) if data else []


def _error_detail(response: httpx.Response) -> str:
    try:
        return str(response.json().get("detail", response.text))
    except ValueError:
        return response.text


# =============================================================================
# List helpers
# =============================================================================


def sort_core_first(templates: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Core templates first; stored order is kept within each group."""
    return sorted(templates, key=lambda t: not t.get("is_core", False))


def swap_templates(templates: list[dict[str, Any]], first_id: int, second_id: int) -> list[dict[str, int]]:
    """Return reorder items that swap two templates in the stored order.

    ``templates`` must be the full list in stored order. Every template gets a
    dense position so stale gaps are closed too.
    """
    ids = [t["id"] for t in templates]
    if first_id not in ids or second_id not in ids:
        return []
    i, j = ids.index(first_id), ids.index(second_id)
    ids[i], ids[j] = ids[j], ids[i]
    return [{"id": template_id, "order": position} for position, template_id in enumerate(ids)]


# =============================================================================
# Session State
# =============================================================================


def init_session_state() -> None:
    """Initialize Streamlit session state."""
    if "selected_template_id" not in st.session_state:
        st.session_state.selected_template_id = None
    if "editing_template" not in st.session_state:
        st.session_state.editing_template = None
    if "field_values" not in st.session_state:
        st.session_state.field_values = {}
    if "field_template_id" not in st.session_state:
        st.session_state.field_template_id = None
    if "enhancement" not in st.session_state:
        st.session_state.enhancement = None


def select_template(template_id: int | None) -> None:
    st.session_state.selected_template_id = template_id
    st.session_state.enhancement = None


# =============================================================================
# UI Components
# =============================================================================


def render_sidebar(client: PromptForgeClient, repo: PreferencesRepository) -> UserPreferences:
    """Render connection status and provider settings.

    Args:
        client: The API client instance.
        repo: Preferences repository for the local settings file.

    Returns:
        The current preferences.
    """
    preferences = repo.load()

    with st.sidebar:
        st.title("🪄 Prompt Templates")

        st.divider()

        if client.health_check():
            st.success("✅ API Connected")
        else:
            st.error("❌ API Disconnected")
            st.info(f"API URL: {API_BASE_URL}")

        st.divider()

        st.subheader("Enhancement Provider")
        providers = list(GatewayProvider)
        provider = st.selectbox(
            "Provider",
            providers,
            index=providers.index(preferences.selected_provider),
            format_func=lambda p: p.value,
        )

        api_key = st.text_input(
            f"{provider.value} API key",
            value=preferences.api_keys.get(provider, ""),
            type="password",
            help=f"Stored locally in {repo.path}",
        )

        models: list[dict[str, Any]] = []
        if api_key and st.button("Load models", use_container_width=True):
            models = client.list_models(provider, api_key)
            st.session_state[f"models_{provider.value}"] = models
        models = st.session_state.get(f"models_{provider.value}", models)

        model_ids = [""] + [m["id"] for m in models]
        current_model = preferences.selected_model if provider == preferences.selected_provider else None
        if current_model and current_model not in model_ids:
            model_ids.append(current_model)
        model = st.selectbox(
            "Model",
            model_ids,
            index=model_ids.index(current_model or ""),
            format_func=lambda m: m or "Provider default",
        )

        col1, col2 = st.columns(2)
        with col1:
            if st.button("Save", type="primary", use_container_width=True):
                api_keys = dict(preferences.api_keys)
                if api_key:
                    api_keys[provider] = api_key
                else:
                    api_keys.pop(provider, None)
                preferences = repo.update(
                    selected_provider=provider,
                    selected_model=model or None,
                    api_keys=api_keys,
                )
                st.success("Settings saved")
        with col2:
            if st.button("Clear keys", use_container_width=True):
                preferences = repo.clear_api_keys()
                st.rerun()

        st.divider()
        st.caption(f"API: `{API_BASE_URL}`")

    return preferences


def render_template_list(client: PromptForgeClient) -> list[dict[str, Any]]:
    """Render the template list with domain filter and move actions.

    Args:
        client: The API client instance.

    Returns:
        All templates in stored order.
    """
    st.subheader("📚 Templates")

    templates = client.list_templates()

    domain = st.selectbox("Domain", [ALL_DOMAINS] + [d.value for d in Domain])
    visible = sort_core_first(templates)
    if domain != ALL_DOMAINS:
        visible = [t for t in visible if t["domain"] == domain]

    if st.button("➕ New template", use_container_width=True):
        st.session_state.editing_template = {}

    if not visible:
        st.info("No templates found. Create one to get started.")
        return templates

    for index, template in enumerate(visible):
        is_selected = template["id"] == st.session_state.selected_template_id
        with st.container(border=True):
            star = "⭐ " if template.get("is_core") else ""
            label = f"**{star}{template['name']}**" if is_selected else f"{star}{template['name']}"
            if st.button(label, key=f"select_{template['id']}", use_container_width=True):
                select_template(template["id"])
                st.rerun()
            st.caption(f"{template['domain']} · {template['provider_type']} · {template['model_type']}")

            up, down, edit, copy, delete = st.columns(5)
            if up.button("⬆", key=f"up_{template['id']}", disabled=index == 0):
                _apply_swap(client, templates, template["id"], visible[index - 1]["id"])
            if down.button("⬇", key=f"down_{template['id']}", disabled=index == len(visible) - 1):
                _apply_swap(client, templates, template["id"], visible[index + 1]["id"])
            if edit.button("✏️", key=f"edit_{template['id']}", help="Edit template"):
                st.session_state.editing_template = template
                st.rerun()
            if copy.button("📄", key=f"copy_{template['id']}", help="Duplicate template"):
                duplicate = {k: template[k] for k in _EDITABLE_FIELDS}
                duplicate["name"] = f"{template['name']} (Copy)"
                duplicate["is_core"] = False
                if client.create_template(duplicate):
                    st.rerun()
            if delete.button("🗑️", key=f"delete_{template['id']}", help="Delete template"):
                if client.delete_template(template["id"]):
                    if is_selected:
                        select_template(None)
                    st.rerun()

    return templates


def _apply_swap(client: PromptForgeClient, templates: list[dict[str, Any]], first_id: int, second_id: int) -> None:
    items = swap_templates(templates, first_id, second_id)
    if items and client.reorder_templates(items):
        st.rerun()


_EDITABLE_FIELDS = (
    "name",
    "content",
    "is_core",
    "domain",
    "provider_type",
    "model_type",
    "role_type",
    "methodologies",
)


def render_editor(client: PromptForgeClient) -> None:
    """Render the create/edit form when a template is being edited."""
    template = st.session_state.editing_template
    if template is None:
        return

    is_new = not template.get("id")
    st.subheader("🆕 New Template" if is_new else f"✏️ Edit: {template['name']}")

    with st.form("template_form"):
        name = st.text_input("Name", value=template.get("name", ""))
        content = st.text_area(
            "Content",
            value=template.get("content", ""),
            height=220,
            help="Use {{name}} for dynamic fields",
        )

        col1, col2 = st.columns(2)
        with col1:
            domain = _enum_select("Domain", Domain, template.get("domain"))
            provider_type = _enum_select("Provider", ProviderType, template.get("provider_type"))
            model_type = _enum_select("Model", ModelType, template.get("model_type"))
        with col2:
            role_type = _enum_select("Agent role", RoleType, template.get("role_type"))
            methodologies = st.multiselect(
                "Methodologies",
                [m.value for m in Methodology],
                default=template.get("methodologies", []),
            )
            is_core = st.checkbox("Core template", value=template.get("is_core", False))

        submitted = st.form_submit_button("Save", type="primary")
        cancelled = st.form_submit_button("Cancel")

    if cancelled:
        st.session_state.editing_template = None
        st.rerun()

    if submitted:
        if not name.strip():
            st.error("Name is required")
            return
        payload = {
            "name": name.strip(),
            "content": content,
            "is_core": is_core,
            "domain": domain,
            "provider_type": provider_type,
            "model_type": model_type,
            "role_type": role_type,
            "methodologies": methodologies,
        }
        saved = client.create_template(payload) if is_new else client.update_template(template["id"], payload)
        if saved:
            st.session_state.editing_template = None
            select_template(saved["id"])
            st.rerun()


def _enum_select(label: str, enum_cls: type, current: str | None) -> str:
    values = [member.value for member in enum_cls]
    return st.selectbox(label, values, index=values.index(current) if current in values else 0)


def render_preview(client: PromptForgeClient, template: dict[str, Any] | None, preferences: UserPreferences) -> None:
    """Render dynamic field inputs, the generated prompt and enhancement.

    Args:
        client: The API client instance.
        template: The selected template, if any.
        preferences: Current user preferences.
    """
    st.subheader("👁️ Preview")

    if template is None:
        st.info("Select a template to preview")
        return

    # Field values are recomputed, not merged, when the selection changes
    if st.session_state.field_template_id != template["id"]:
        st.session_state.field_template_id = template["id"]
        st.session_state.field_values = {}

    fields = derive_dynamic_fields(template["content"], st.session_state.field_values)
    for field in fields:
        field.value = st.text_input(
            field.name,
            value=field.value,
            key=f"field_{template['id']}_{field.name}",
            placeholder=f"Enter value for {field.name}",
        )
    st.session_state.field_values = fields_to_mapping(fields)

    prompt = render_template(template["content"], st.session_state.field_values)

    enhancer_enabled = st.toggle("🪄 Enhancer", key="enhancer_enabled")
    if not enhancer_enabled:
        st.session_state.enhancement = None

    enhancement = st.session_state.enhancement
    shown = enhancement["enhanced_prompt"] if enhancement else prompt
    st.code(shown, language=None, wrap_lines=True)

    col1, col2 = st.columns(2)
    with col1:
        if st.button("Enhance", type="primary", disabled=not enhancer_enabled, use_container_width=True):
            with st.spinner(f"Enhancing with {preferences.selected_provider.value}..."):
                result = client.enhance_template(template["id"], st.session_state.field_values, preferences)
            if result:
                st.session_state.enhancement = result
                st.rerun()
            else:
                st.warning("Enhancement failed. Check your API key in settings.")
    with col2:
        if enhancement and st.button("Save enhanced as content", use_container_width=True):
            if client.update_template(template["id"], {"content": enhancement["enhanced_prompt"]}):
                st.session_state.enhancement = None
                st.success("Template updated")
                st.rerun()

    with st.expander("Full enhancement prompt"):
        try:
            request = build_enhancement_request(
                prompt,
                TemplateAttributes.model_validate(template),
                preferences.custom_instruction,
                preferences.instruction_tables(),
            )
        except ValueError as e:
            st.error(f"Customized instructions are invalid: {e}")
        else:
            st.markdown("**Original template**")
            st.code(template["content"], language=None, wrap_lines=True)
            st.markdown("**Instruction**")
            st.code(request.instruction, language=None, wrap_lines=True)
            if enhancement:
                st.markdown("**Final enhanced prompt**")
                st.markdown(enhancement["enhanced_prompt"])


def render_instruction_editor(repo: PreferencesRepository) -> None:
    """Render the editor for the enhancement instruction tables.

    Saving a category stores a full copy of it, which then shadows the
    built-in table for that category.
    """
    st.subheader("🧩 Enhancement Instructions")

    preferences = repo.load()
    defaults = DEFAULT_INSTRUCTION_TABLES.to_dict()
    current = preferences.instruction_tables().to_dict()

    custom_instruction = st.text_area(
        "Custom instruction",
        value=preferences.custom_instruction,
        help="Appended to every enhancement instruction",
    )

    tabs = st.tabs([category.capitalize() for category in CATEGORIES])
    edited: dict[str, dict[str, str]] = {}
    for tab, category in zip(tabs, CATEGORIES):
        with tab:
            edited[category] = {
                key: st.text_area(key, value=text, key=f"instr_{category}_{key}")
                for key, text in current[category].items()
            }

    col1, col2 = st.columns(2)
    with col1:
        if st.button("Save instructions", type="primary", use_container_width=True):
            changed = {category: table for category, table in edited.items() if table != defaults[category]}
            repo.update(
                custom_instruction=custom_instruction,
                instruction_overrides=InstructionOverrides.model_validate(changed),
            )
            st.success("Instructions saved")
    with col2:
        if st.button("Reset to defaults", use_container_width=True):
            repo.reset_instruction_overrides()
            for category in CATEGORIES:
                for key in defaults[category]:
                    st.session_state.pop(f"instr_{category}_{key}", None)
            st.rerun()


# =============================================================================
# Main App
# =============================================================================


def main() -> None:
    """Main application entry point."""
    init_session_state()

    client = PromptForgeClient(API_BASE_URL)
    repo = PreferencesRepository(PREFERENCES_PATH)

    preferences = render_sidebar(client, repo)

    st.title("Prompt Template Manager")

    tab1, tab2 = st.tabs(["Templates", "Enhancement Instructions"])

    with tab1:
        list_col, main_col = st.columns([1, 2])

        with list_col:
            templates = render_template_list(client)

        with main_col:
            render_editor(client)
            selected = next(
                (t for t in templates if t["id"] == st.session_state.selected_template_id),
                None,
            )
            render_preview(client, selected, preferences)

    with tab2:
        render_instruction_editor(repo)


if __name__ == "__main__":
    main()
