import pytest

from extraction.task_extractor import TaskExtractor
from llm.llm_client import LLMClient
from taskboard.errors import NoExtractableJSON


def test_extract_tags_source_and_folder(fake_provider_factory):
    provider = fake_provider_factory(
        '[{"text":"Book dentist","priority":2,"category":"general","dueDate":null}]'
    )
    extractor = TaskExtractor(llm_client=LLMClient(provider=provider))
    tasks = extractor.extract("Book dentist", folder_id="work")
    assert len(tasks) == 1
    assert tasks[0].source_text == "Book dentist"
    assert tasks[0].folder_id == "work"


def test_garbage_output_is_not_silently_empty(fake_provider_factory):
    provider = fake_provider_factory("THIS IS NOT JSON AT ALL")
    extractor = TaskExtractor(llm_client=LLMClient(provider=provider))
    with pytest.raises(NoExtractableJSON):
        extractor.extract("random text")
