"""kida template sources for the documentation page, one per UI provider."""

SWAGGER_UI = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>{{ title }}</title>
  <link rel="stylesheet" href="{{ cdn }}/swagger-ui.css">
</head>
<body>
  <div id="swagger-ui"></div>
  <script src="{{ cdn }}/swagger-ui-bundle.js" crossorigin></script>
  <script>
    window.onload = function () {
      window.ui = SwaggerUIBundle({{ options }});
    };
  </script>
</body>
</html>
"""

REDOC = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>{{ title }}</title>
  <style>body { margin: 0; padding: 0; }</style>
</head>
<body>
  <redoc spec-url="{{ spec_url }}"></redoc>
  <script src="{{ cdn }}/bundles/redoc.standalone.js"></script>
</body>
</html>
"""

STOPLIGHT = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>{{ title }}</title>
  <script src="{{ cdn }}/web-components.min.js"></script>
  <link rel="stylesheet" href="{{ cdn }}/styles.min.css">
</head>
<body>
  <elements-api apiDescriptionUrl="{{ spec_url }}" router="hash" layout="sidebar"></elements-api>
</body>
</html>
"""
