from core.domain.models import ContentBatch
from core.services.prompt_builder import OUTPUT_GRAMMAR, SYSTEM_PROMPT, build_prompts, render_posts


def _batch():
    return ContentBatch.from_texts(["gm", "this is fine", "ratio"])


def test_identical_inputs_render_identical_bytes():
    first = build_prompts(_batch(), "jack")
    second = build_prompts(_batch(), "jack")
    assert first == second
    assert first.user.encode("utf-8") == second.user.encode("utf-8")


def test_posts_are_numbered_in_provider_order():
    assert render_posts(_batch()) == "1. gm\n2. this is fine\n3. ratio"


def test_user_prompt_embeds_posts_grammar_and_handle():
    prompts = build_prompts(_batch(), "jack")
    assert prompts.system == SYSTEM_PROMPT
    assert "1. gm\n2. this is fine\n3. ratio" in prompts.user
    assert OUTPUT_GRAMMAR in prompts.user
    assert prompts.user.count("@jack") >= 2


def test_different_handles_render_differently():
    assert build_prompts(_batch(), "jack").user != build_prompts(_batch(), "dorsey").user
