# services/stylesheets.py
# Default CSS applied ahead of caller-supplied styles.

PDF_DEFAULT_CSS = """
body {
  font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, 'Helvetica Neue', Arial,
               'Noto Sans CJK SC', sans-serif;
  line-height: 1.6;
  color: #333;
  margin: 0;
  padding: 20px;
  font-size: 14px;
}
h1, h2, h3, h4, h5, h6 {
  color: #2c3e50;
  margin-top: 2em;
  margin-bottom: 1em;
  font-weight: 600;
  page-break-after: avoid;
}
h1 { font-size: 2.5em; border-bottom: 3px solid #3498db; padding-bottom: 0.5em; }
h2 { font-size: 2em; border-bottom: 2px solid #bdc3c7; padding-bottom: 0.3em; }
h3 { font-size: 1.5em; }
h4 { font-size: 1.25em; }
h5 { font-size: 1.1em; }
h6 { font-size: 1em; }
p { margin: 1em 0; }
code {
  background-color: #f8f9fa;
  padding: 0.2em 0.4em;
  border-radius: 3px;
  font-family: 'SFMono-Regular', Monaco, Consolas, 'Liberation Mono', 'Courier New', monospace;
  font-size: 0.9em;
}
pre {
  background-color: #f8f9fa;
  padding: 1em;
  border-radius: 5px;
  border-left: 4px solid #3498db;
  page-break-inside: avoid;
  white-space: pre-wrap;
}
pre code { background: none; padding: 0; }
table { border-collapse: collapse; width: 100%; margin: 1.5em 0; page-break-inside: avoid; }
th, td { border: 1px solid #ddd; padding: 0.75em; text-align: left; font-size: 0.9em; }
th { background-color: #f8f9fa; font-weight: 600; }
tr:nth-child(even) { background-color: #f9f9f9; }
blockquote {
  border-left: 4px solid #3498db;
  margin: 1.5em 0;
  padding: 1em;
  color: #666;
  font-style: italic;
  background-color: #f8f9fa;
  page-break-inside: avoid;
}
ul, ol { margin: 1em 0; padding-left: 2em; }
li { margin: 0.5em 0; }
img { max-width: 100%; height: auto; display: block; margin: 1em auto; }
hr { border: none; border-top: 2px solid #eee; margin: 2em 0; }
.text-center { text-align: center; }
.text-right { text-align: right; }
.text-left { text-align: left; }
.highlight { background-color: #fff3cd; padding: 0.5em; border-left: 4px solid #ffc107; }
"""

WORD_DEFAULT_CSS = """
body {
  font-family: 'Microsoft YaHei', 'SimSun', Arial, sans-serif;
  line-height: 1.6;
  color: #333;
  font-size: 12pt;
}
h1, h2, h3, h4, h5, h6 { color: #2c3e50; margin-top: 1.5em; margin-bottom: 0.5em; }
h1 { font-size: 24pt; }
h2 { font-size: 18pt; }
h3 { font-size: 14pt; }
table { border-collapse: collapse; width: 100%; margin: 1em 0; }
th, td { border: 1px solid #ddd; padding: 8px; text-align: left; }
th { background-color: #f2f2f2; font-weight: bold; }
code { background-color: #f4f4f4; padding: 2px 4px; }
pre { background-color: #f4f4f4; padding: 1em; }
blockquote { border-left: 4px solid #3498db; margin: 1em 0; padding-left: 1em; color: #666; }
img { max-width: 100%; height: auto; }
"""
