import io
import sys

from formpost import FormBuilder


def main(path: str) -> None:
    body = io.BytesIO()
    with open(path, "rb") as image, FormBuilder(body) as form:
        form.add_field("purpose", "vision")
        form.add_file_with_detected_type("image", image)

    print("Content-Type:", form.content_type)
    print("Content-Length:", len(body.getvalue()))
    print(body.getvalue()[:300].decode("utf-8", errors="replace"))


if __name__ == "__main__":
    main(sys.argv[1] if len(sys.argv) > 1 else __file__)
