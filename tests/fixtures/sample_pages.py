"""Sample Confluence XHTML pages for testing.

These fixtures represent Confluence storage format (XHTML) content
with various elements including macros, tables, code blocks, etc.

XHTML format uses Confluence-specific namespaces:
- ac: namespace for Confluence macros
- ri: namespace for resource identifiers (images, attachments)
"""

# Simple page with headings, paragraphs, and lists
SAMPLE_PAGE_SIMPLE = """
<h1>Test Page</h1>
<p>This is a simple test page with basic formatting.</p>
<h2>Section 1</h2>
<ul>
<li>Item 1</li>
<li>Item 2</li>
</ul>
<h2>Section 2</h2>
<ol>
<li>First</li>
<li>Second</li>
</ol>
"""

# Page with panel and code macros
SAMPLE_PAGE_WITH_MACROS = """
<h1>Page with Macros</h1>
<ac:structured-macro ac:name="info" ac:schema-version="1">
<ac:rich-text-body>
<p>This is an informational panel.</p>
</ac:rich-text-body>
</ac:structured-macro>
<ac:structured-macro ac:name="code" ac:schema-version="1">
<ac:parameter ac:name="language">python</ac:parameter>
<ac:plain-text-body><![CDATA[def hello():
    print("Hello, <World>!")]]></ac:plain-text-body>
</ac:structured-macro>
<p>Regular content after macro.</p>
"""

# Page with a header row and a short body row
SAMPLE_PAGE_WITH_TABLES = """
<table>
<tbody>
<tr><th>Name</th><th>Value</th><th>Notes</th></tr>
<tr><td>alpha</td><td>1</td><td>first</td></tr>
<tr><td>beta</td><td>a|b</td></tr>
</tbody>
</table>
"""

# Task list followed by a note list
SAMPLE_PAGE_WITH_TASKS = """
<ac:task-list>
<ac:task><ac:task-id>1</ac:task-id><ac:task-status>incomplete</ac:task-status><ac:task-body>Write docs</ac:task-body></ac:task>
<ac:task><ac:task-id>2</ac:task-id><ac:task-status>complete</ac:task-status><ac:task-body>Ship <strong>release</strong></ac:task-body></ac:task>
</ac:task-list>
<ul style="list-style-type: none;">
<li>Remember the changelog</li>
</ul>
"""

# Images, mentions and page links
SAMPLE_PAGE_WITH_LINKS = """
<p>Owner: <ac:link><ri:user ri:username="jdoe" /></ac:link></p>
<p>See <ac:link><ri:page ri:content-title="Release Notes" ri:space-key="TEAM" /></ac:link> and <ac:link><ri:page ri:content-title="Local Page" /></ac:link>.</p>
<ac:image ac:alt="Architecture"><ri:attachment ri:filename="diagram.png" /></ac:image>
<p>Logo <ac:image ac:alt="logo"><ri:url ri:value="https://example.com/logo.png" /></ac:image></p>
"""

# Expand macro with a title
SAMPLE_PAGE_WITH_EXPAND = """
<ac:structured-macro ac:name="expand" ac:schema-version="1">
<ac:parameter ac:name="title">More details</ac:parameter>
<ac:rich-text-body>
<p>Hidden text</p>
</ac:rich-text-body>
</ac:structured-macro>
"""

# Markdown macro holding a bare diagram
SAMPLE_PAGE_WITH_DIAGRAM = """
<ac:structured-macro ac:name="markdown" ac:schema-version="1">
<ac:plain-text-body><![CDATA[flowchart TD
    A[Start] --> B[End]]]></ac:plain-text-body>
</ac:structured-macro>
"""

# REST API page payload (v2 shape)
SAMPLE_PAGE_DATA = {
    'id': '123456',
    'title': 'Release Plan: Q3',
    'spaceId': 'TEAM',
    'createdAt': '2024-01-01T00:00:00.000Z',
    'version': {
        'number': 4,
        'createdAt': '2024-02-01T12:30:00.000Z',
        'createdBy': {'displayName': 'Jane Doe'},
    },
    'body': {
        'storage': {
            'value': '<h1>Plan</h1><p>Ship it.</p>'
                     '<ac:structured-macro ac:name="jira"><ac:parameter ac:name="key">PROJ-1</ac:parameter>'
                     '</ac:structured-macro>',
            'representation': 'storage',
        }
    },
}
