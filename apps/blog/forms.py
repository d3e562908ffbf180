from starlette.datastructures import FormData
from starlette.formparsers import MultiPartParser
from starlette.requests import Request


class RawFieldMultiPartParser(MultiPartParser):
    """Multipart parser that leaves plain (non-file) fields as undecoded bytes.

    Starlette falls back to latin-1 when a field is not valid in the declared
    charset; keeping the bytes lets the caller reject such fields instead.
    """

    def on_part_end(self) -> None:
        if self._current_part.file is None:
            self.items.append((self._current_part.field_name, bytes(self._current_part.data)))
        else:
            super().on_part_end()


async def read_form(request: Request) -> FormData:
    """Read a submitted form; multipart text fields come back as bytes."""
    content_type = request.headers.get('content-type', '').lower()
    if content_type.startswith('multipart/form-data'):
        return await RawFieldMultiPartParser(request.headers, request.stream()).parse()
    return await request.form()
