import xml.etree.ElementTree as ET
from pathlib import Path

from droidprep import xmltree


def _prefs(root):
    return {p.get("name"): p.get("value") for p in root.findall("preference")}


def test_merge_lifts_platform_block_and_dedupes_preferences():
    src = xmltree.parse_string(
        "<widget id='com.example'>"
        "<name>New</name>"
        "<preference name='Orientation' value='portrait'/>"
        "<plugin name='cordova-plugin-x'/>"
        "<platform name='android'><preference name='Orientation' value='landscape'/></platform>"
        "<platform name='ios'><preference name='Ios' value='1'/></platform>"
        "</widget>"
    )
    dest = xmltree.parse_string(
        "<widget><name>Old</name><preference name='loglevel' value='DEBUG'/></widget>"
    )
    xmltree.merge_xml(src, dest, "android", clobber=True)

    assert dest.get("id") == "com.example"
    assert [n.text for n in dest.findall("name")] == ["New"]
    assert _prefs(dest) == {"loglevel": "DEBUG", "Orientation": "landscape"}
    assert dest.find("plugin") is None
    assert dest.find("platform") is None


def test_merge_does_not_duplicate_identical_children():
    src = xmltree.parse_string("<widget><access origin='*'/></widget>")
    dest = xmltree.parse_string("<widget><access origin='*'/></widget>")
    xmltree.merge_xml(src, dest)
    assert len(dest.findall("access")) == 1


def test_merge_without_clobber_keeps_existing_attributes():
    src = xmltree.parse_string("<widget version='2.0'/>")
    dest = xmltree.parse_string("<widget version='1.0'/>")
    xmltree.merge_xml(src, dest)
    assert dest.get("version") == "1.0"


def test_to_string_declaration_and_indent():
    root = xmltree.make_element("resources")
    root.append(xmltree.make_element("string", {"name": "app_name"}, "Hello"))
    assert xmltree.to_string(root) == (
        '<?xml version="1.0" encoding="utf-8"?>\n'
        "<resources>\n"
        '    <string name="app_name">Hello</string>\n'
        "</resources>\n"
    )


def test_parse_keeps_comments(tmp_path: Path):
    path = tmp_path / "a.xml"
    path.write_text("<?xml version='1.0'?>\n<resources><!-- keep me --><string name='a'>b</string></resources>")
    tree = xmltree.parse(path)
    xmltree.write(tree, path)
    assert "<!-- keep me -->" in path.read_text()


def test_tools_namespace_only_declared_while_used():
    root = xmltree.parse_string(
        '<resources xmlns:tools="http://schemas.android.com/tools"><style name="s"/></resources>'
    )
    assert "xmlns:tools" not in xmltree.to_string(root)

    item = xmltree.make_element("item", {"name": "x", xmltree.tools_attr("targetApi"): "31"})
    root.find("style").append(item)
    text = xmltree.to_string(root)
    assert 'xmlns:tools="http://schemas.android.com/tools"' in text
    assert 'tools:targetApi="31"' in text


def test_find_named_and_iter_children():
    root = xmltree.parse_string("<r><s name='a'/><s name='b'/><t name='a'/></r>")
    assert xmltree.find_named(root, "s", "b") is root[1]
    assert xmltree.find_named(root, "s", "c") is None
    assert [e.tag for e in xmltree.iter_children(root, "s")] == ["s", "s"]


def test_strip_default_namespace_keeps_declaration():
    root = ET.fromstring('<widget xmlns="http://www.w3.org/ns/widgets"><name>A</name></widget>')
    assert xmltree.strip_default_namespace(root) is True
    assert root.find("name").text == "A"
    assert 'xmlns="http://www.w3.org/ns/widgets"' in xmltree.to_string(root)
