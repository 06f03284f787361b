"""Unit tests for page and form models."""

import pytest

from tinywiki.core.errors import ValidationFailure
from tinywiki.core.models import (
    EMPTY_PAGE_MARKDOWN,
    NEW_PAGE_ID,
    CreateForm,
    DeleteForm,
    Page,
    SaveForm,
)


class TestPage:
    def test_placeholder(self):
        page = Page.placeholder("Nope")
        assert page.id == NEW_PAGE_ID == -1
        assert page.name == "Nope"
        assert page.content == EMPTY_PAGE_MARKDOWN
        assert page.is_new is True

    def test_stored_page_is_not_new(self):
        assert Page(id=3, name="Home", content="").is_new is False


class TestSaveForm:
    def test_new_page_flag(self):
        form = SaveForm.from_fields(id="-1", title="Home", markdown="# Hi", new_page="yes")
        assert form.new_page is True

    @pytest.mark.parametrize("flag", ["no", "YES", "true", None])
    def test_anything_else_is_update(self, flag):
        form = SaveForm.from_fields(id="7", title="Home", markdown="x", new_page=flag)
        assert form.new_page is False
        assert form.id == 7

    def test_missing_markdown_is_empty(self):
        form = SaveForm.from_fields(id="7", title="Home", markdown=None)
        assert form.markdown == ""

    def test_blank_title(self):
        with pytest.raises(ValidationFailure):
            SaveForm.from_fields(id="7", title="  ", markdown="x")

    def test_missing_title(self):
        with pytest.raises(ValidationFailure):
            SaveForm.from_fields(id="7", title=None, markdown="x")

    def test_update_requires_id(self):
        with pytest.raises(ValidationFailure):
            SaveForm.from_fields(id=None, title="Home", markdown="x", new_page="no")

    def test_new_page_needs_no_id(self):
        form = SaveForm.from_fields(id=None, title="Home", markdown="x", new_page="yes")
        assert form.id is None

    def test_malformed_id(self):
        with pytest.raises(ValidationFailure):
            SaveForm.from_fields(id="abc", title="Home", markdown="x")


class TestDeleteForm:
    def test_parses_id(self):
        assert DeleteForm.from_fields(id="12").id == 12

    def test_missing_id(self):
        with pytest.raises(ValidationFailure):
            DeleteForm.from_fields(id=None)


class TestCreateForm:
    def test_missing_name_defaults_blank(self):
        assert CreateForm.from_fields(name=None).name == ""


class TestIdBounds:
    def test_largest_id_accepted(self):
        assert DeleteForm.from_fields(id=str(2**63 - 1)).id == 2**63 - 1

    def test_oversized_delete_id(self):
        with pytest.raises(ValidationFailure):
            DeleteForm.from_fields(id="99999999999999999999999")

    def test_oversized_save_id(self):
        with pytest.raises(ValidationFailure):
            SaveForm.from_fields(id=str(2**63), title="Home", markdown="x")


class TestPageNames:
    def test_slash_in_title(self):
        with pytest.raises(ValidationFailure):
            SaveForm.from_fields(id="-1", title="a/b", markdown="x", new_page="yes")

    def test_slash_in_create_name(self):
        with pytest.raises(ValidationFailure):
            CreateForm.from_fields(name="a/b")
