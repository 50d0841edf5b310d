# tests/test_board.py
from fakes import recipe_payload
from rasoi_revive.core.board import RecipeBoard
from rasoi_revive.core.models import Recipe


def _recipes(*ids):
    return [Recipe.model_validate(recipe_payload(i)) for i in ids]


def test_attach_image_patches_only_that_recipe():
    board = RecipeBoard(_recipes("r1", "r2", "r3"))
    before = board.recipes()
    assert board.attach_image("r2", "data:image/png;base64,AA") is True
    after = board.recipes()
    assert [r.id for r in after] == ["r1", "r2", "r3"]
    assert after[0] == before[0]
    assert after[2] == before[2]
    assert after[1].image_url == "data:image/png;base64,AA"
    assert after[1].model_copy(update={"image_url": None}) == before[1]


def test_image_is_never_replaced_once_set():
    board = RecipeBoard(_recipes("r1"))
    board.attach_image("r1", "data:image/png;base64,first")
    assert board.attach_image("r1", "data:image/png;base64,second") is False
    assert board.get("r1").image_url == "data:image/png;base64,first"


def test_attach_image_unknown_id():
    board = RecipeBoard(_recipes("r1"))
    assert board.attach_image("nope", "data:image/png;base64,AA") is False
    assert len(board) == 1


def test_replace_discards_previous_batch():
    board = RecipeBoard(_recipes("r1", "r2"))
    board.replace(_recipes("x"))
    assert [r.id for r in board] == ["x"]
    assert "r1" not in board
    board.clear()
    assert board.recipes() == []
