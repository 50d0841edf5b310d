# tests/fakes.py
import json

from rasoi_revive.services.gemini import GenerativeBackend, ImageCandidate, InlineImage

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake"


def recipe_payload(rid, name=None, **overrides):
    payload = {
        "id": rid,
        "recipeName": name or f"Dish {rid}",
        "description": f"A tasty dish made from leftovers ({rid}).",
        "prepTime": "10 mins",
        "cookTime": "20 mins",
        "difficulty": "Easy",
        "servings": 2,
        "ingredients": [{"item": "Leftover Dal", "amount": "1 cup"}, {"item": "Atta", "amount": "2 cups"}],
        "steps": ["Knead the dough with dal.", "Roll out and cook on a tawa."],
        "tags": ["Vegetarian", "Zero Waste"],
    }
    payload.update(overrides)
    return payload


def batch_text(*ids):
    return json.dumps({"recipes": [recipe_payload(i) for i in ids]})


class FakeBackend(GenerativeBackend):
    """
    Deterministic stand-in for Gemini.

    `payload` is returned (or raised, if an exception) for every structured call.
    `images` maps a dish name to a list of candidates or an exception; dishes not
    listed get one PNG candidate.
    """

    def __init__(self, payload=None, images=None):
        self.payload = payload
        self.images = images or {}
        self.structured_calls = []
        self.image_calls = []

    def generate_structured(self, prompt, schema, system_instruction=None):
        self.structured_calls.append({"prompt": prompt, "schema": schema, "system": system_instruction})
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload

    def generate_image(self, prompt, aspect_ratio):
        self.image_calls.append({"prompt": prompt, "aspect_ratio": aspect_ratio})
        for name, outcome in self.images.items():
            if f'"{name}"' in prompt:
                if isinstance(outcome, Exception):
                    raise outcome
                return outcome
        return [ImageCandidate(finish_reason="STOP", images=[InlineImage(mime_type="image/png", data=PNG_BYTES)])]

    def image_order(self):
        return [c["prompt"].split('"')[1] for c in self.image_calls]


def blocked():
    return [ImageCandidate(finish_reason="IMAGE_SAFETY", images=[])]


