from fluffybot.conversation.diff_context import LineAnchor, extract_code_context


DIFF = """@@ -10,5 +10,7 @@ def upload(path):
     data = read(path)
     client = Client()
-    client.send(data)
+    for attempt in range(3):
+        client.send(data)
+        break
     log("done")
     return True
"""

CHANGES = [{"old_path": "app/upload.py", "new_path": "app/upload.py", "diff": DIFF}]


def test_marks_target_line_on_new_side():
    context = extract_code_context(CHANGES, LineAnchor(path="app/upload.py", line=12))

    lines = context.splitlines()
    assert lines[0] == "File: app/upload.py, Line: 12"
    assert ">12| +    for attempt in range(3):" in lines
    assert " 10|      data = read(path)" in lines
    # removed line has no new-side number
    assert not any("-    client.send(data)" in line for line in lines)


def test_old_side_anchor_uses_source_numbers():
    context = extract_code_context(CHANGES, LineAnchor(path="app/upload.py", line=12, new_side=False))

    assert ">12| -    client.send(data)" in context.splitlines()


def test_radius_limits_context():
    context = extract_code_context(CHANGES, LineAnchor(path="app/upload.py", line=10), radius=1)

    lines = context.splitlines()
    assert len(lines) == 3
    assert lines[1].startswith(">10|")
    assert lines[2].startswith(" 11|")


def test_unknown_file_falls_back():
    context = extract_code_context(CHANGES, LineAnchor(path="other.py", line=3))

    assert context == "File: other.py, Line: 3"


def test_line_outside_diff_falls_back():
    context = extract_code_context(CHANGES, LineAnchor(path="app/upload.py", line=200))

    assert context == "File: app/upload.py, Line: 200"


def test_empty_changes_falls_back():
    assert extract_code_context([], LineAnchor(path="a.py", line=1)) == "File: a.py, Line: 1"
