import itertools

import pytest

from filestore.exceptions import InvalidRequest
from filestore.multipart import MAX_BOUNDARY_ATTEMPTS, MultipartBody, encode_file_upload, generate_boundary


def test_generate_boundary_is_fresh_per_call():
    first, second = generate_boundary(), generate_boundary()
    assert first.startswith("Boundary-")
    assert second.startswith("Boundary-")
    assert first != second

def test_parts_open_and_body_terminates_with_boundary():
    body = encode_file_upload("report.pdf", b"%PDF-1.7 ...", "application/pdf")
    opener = f"--{body.boundary}\r\n".encode()

    assert body.content.startswith(opener)
    assert body.content.count(opener) == 2
    assert body.content.endswith(f"--{body.boundary}--".encode())

def test_part_headers():
    body = encode_file_upload("report.pdf", b"%PDF", "application/pdf", boundary_factory=lambda: "Boundary-X")
    key_part, file_part = body.content.split(b"--Boundary-X\r\n")[1:]

    assert key_part == b'Content-Disposition: form-data; name="key"\r\n\r\nreport.pdf\r\n'
    assert file_part == (
        b'Content-Disposition: form-data; name="file"; filename="report.pdf"\r\n'
        b"Content-Type: application/pdf\r\n"
        b"\r\n"
        b"%PDF\r\n"
        b"--Boundary-X--"
    )

def test_unicode_key_is_utf8_encoded():
    body = encode_file_upload("résumé.txt", b"cv", "text/plain", boundary_factory=lambda: "Boundary-X")
    assert 'filename="résumé.txt"'.encode("utf-8") in body.content

def test_content_type_header_value():
    body = MultipartBody(content=b"", boundary="Boundary-X")
    assert body.content_type == "multipart/form-data; boundary=Boundary-X"

def test_boundary_regenerated_when_found_in_content():
    candidates = iter(["Boundary-A", "Boundary-B"])
    data = b"payload that happens to contain --Boundary-A in it"

    body = encode_file_upload("k.bin", data, boundary_factory=lambda: next(candidates))

    assert body.boundary == "Boundary-B"
    assert data in body.content

def test_boundary_regenerated_when_found_in_key():
    candidates = iter(["Boundary-A", "Boundary-B"])
    body = encode_file_upload("Boundary-A.txt", b"x", boundary_factory=lambda: next(candidates))
    assert body.boundary == "Boundary-B"

def test_gives_up_after_repeated_collisions():
    counter = itertools.count()
    calls = []

    def factory():
        calls.append(next(counter))
        return "Boundary-SAME"

    with pytest.raises(InvalidRequest):
        encode_file_upload("k", b"Boundary-SAME", boundary_factory=factory)
    assert len(calls) == MAX_BOUNDARY_ATTEMPTS

def test_empty_file():
    body = encode_file_upload("empty.txt", b"", "text/plain", boundary_factory=lambda: "Boundary-X")
    assert body.content.endswith(b"Content-Type: text/plain\r\n\r\n\r\n--Boundary-X--")

def test_filename_quotes_and_line_breaks_are_escaped():
    key = 'evil"; name="key\r\nContent-Type: text/html'
    body = encode_file_upload(key, b"<p>", "text/plain", boundary_factory=lambda: "Boundary-X")
    file_part = body.content.split(b"--Boundary-X\r\n")[2]
    headers, _, payload = file_part.partition(b"\r\n\r\n")

    assert headers.split(b"\r\n") == [
        b'Content-Disposition: form-data; name="file"; filename="evil%22; name=%22key%0D%0AContent-Type: text/html"',
        b"Content-Type: text/plain",
    ]
    assert payload == b"<p>\r\n--Boundary-X--"

def test_key_field_keeps_raw_value():
    key = 'a "quoted" name.txt'
    body = encode_file_upload(key, b"x", boundary_factory=lambda: "Boundary-X")
    key_part = body.content.split(b"--Boundary-X\r\n")[1]
    assert key_part == b'Content-Disposition: form-data; name="key"\r\n\r\na "quoted" name.txt\r\n'
    assert b'filename="a %22quoted%22 name.txt"' in body.content
