"""Assemble a static Next.js project from the generated node artifacts."""

import json
import re

from flowgen.generation.schema import render_create_table
from flowgen.models.schemas import FlowNode, NodeType, ProjectFile

NEXT_VERSION = "14.2.5"

_PACKAGE_DEPENDENCIES = {
    "next": NEXT_VERSION,
    "react": "^18.3.1",
    "react-dom": "^18.3.1",
    "typescript": "^5.5.4",
    "@types/node": "^20.14.12",
    "@types/react": "^18.3.3",
    "@types/react-dom": "^18.3.0",
    "tailwindcss": "^3.4.7",
    "autoprefixer": "^10.4.19",
    "postcss": "^8.4.40",
    "@supabase/supabase-js": "^2.44.4",
}

_TSCONFIG = {
    "compilerOptions": {
        "target": "es5",
        "lib": ["dom", "dom.iterable", "es6"],
        "allowJs": True,
        "skipLibCheck": True,
        "strict": True,
        "noEmit": True,
        "esModuleInterop": True,
        "module": "esnext",
        "moduleResolution": "bundler",
        "resolveJsonModule": True,
        "isolatedModules": True,
        "jsx": "preserve",
        "incremental": True,
        "plugins": [{"name": "next"}],
        "baseUrl": ".",
        "paths": {"@/*": ["./*"]},
    },
    "include": ["next-env.d.ts", "**/*.ts", "**/*.tsx", ".next/types/**/*.ts"],
    "exclude": ["node_modules"],
}

NEXT_CONFIG = """/** @type {import('next').NextConfig} */
const nextConfig = {
  output: 'export',
  images: { unoptimized: true },
}

module.exports = nextConfig
"""

TAILWIND_CONFIG = """/** @type {import('tailwindcss').Config} */
module.exports = {
  content: [
    './pages/**/*.{js,ts,jsx,tsx,mdx}',
    './components/**/*.{js,ts,jsx,tsx,mdx}',
    './app/**/*.{js,ts,jsx,tsx,mdx}',
  ],
  theme: {
    extend: {},
  },
  plugins: [],
}
"""

POSTCSS_CONFIG = """module.exports = {
  plugins: {
    tailwindcss: {},
    autoprefixer: {},
  },
}
"""

GLOBALS_CSS = """@tailwind base;
@tailwind components;
@tailwind utilities;
"""

GITIGNORE = """node_modules/
.next/
out/
.env*.local
"""

SUPABASE_CLIENT = """import { createClient } from '@supabase/supabase-js'

const supabaseUrl = process.env.NEXT_PUBLIC_SUPABASE_URL!
const supabaseAnonKey = process.env.NEXT_PUBLIC_SUPABASE_ANON_KEY!

export const supabase = createClient(supabaseUrl, supabaseAnonKey)
"""

_JSX_ATTRIBUTES = [
    (re.compile(r"\bclass="), "className="),
    (re.compile(r"\bfor="), "htmlFor="),
]


_TAG = re.compile(r"(<[^>]*>)")
_BRACE = re.compile(r"[{}]")


def _escape_braces(text: str) -> str:
    return _BRACE.sub(lambda m: "{'" + m.group() + "'}", text)


def to_jsx(markup: str) -> str:
    """Rewrite HTML into JSX.

    Attribute names that JSX spells differently are renamed, and literal
    braces in text content become string expressions so that JSX does not
    evaluate them.
    """
    parts = _TAG.split(markup)
    for i, part in enumerate(parts):
        if i % 2:
            for pattern, replacement in _JSX_ATTRIBUTES:
                part = pattern.sub(replacement, part)
        else:
            part = _escape_braces(part)
        parts[i] = part
    return "".join(parts)


def sanitize_project_name(name: str) -> str:
    """Repository and package safe name: ``"My App!"`` -> ``my-app``."""
    slug = re.sub(r"[^a-z0-9._-]+", "-", name.strip().lower()).strip("-._")
    return slug or "flowgen-app"


def page_slug(label: str) -> str:
    """Route segment for a page label: ``"About Us"`` -> ``about-us``."""
    slug = re.sub(r"\s+", "-", label.strip().lower())
    slug = re.sub(r"[^a-z0-9-]", "", slug)
    slug = re.sub(r"-{2,}", "-", slug).strip("-")
    return slug or "page"


def component_name(label: str) -> str:
    """React component name for a page label: ``"about us"`` -> ``AboutUsPage``."""
    words = re.findall(r"[A-Za-z0-9]+", label)
    name = "".join(w[:1].upper() + w[1:] for w in words)
    if not name or name[0].isdigit():
        name = f"Generated{name}"
    return f"{name}Page"


def _render_page(name: str, markup: str) -> str:
    body = "\n".join(f"      {line}" if line.strip() else "" for line in to_jsx(markup).strip().splitlines())
    return f"""export default function {name}() {{
  return (
    <div>
{body}
    </div>
  )
}}
"""


def _render_layout(project_name: str) -> str:
    title = json.dumps(project_name)
    return f"""import './globals.css'

export const metadata = {{
  title: {title},
  description: 'Generated by FlowGen',
}}

export default function RootLayout({{
  children,
}}: {{
  children: React.ReactNode
}}) {{
  return (
    <html lang="en">
      <body>{{children}}</body>
    </html>
  )
}}
"""


def _render_readme(project_name: str, routes: list[str], tables: list[str]) -> str:
    lines = [
        f"# {project_name}",
        "",
        "Generated by FlowGen.",
        "",
        "## Pages",
        "",
        *[f"- `{route}`" for route in routes],
    ]
    if tables:
        lines += [
            "",
            "## Database",
            "",
            "Apply `supabase/schema.sql` in the Supabase SQL editor. Tables:",
            "",
            *[f"- `{table}`" for table in tables],
        ]
    lines += [
        "",
        "## Development",
        "",
        "```bash",
        "npm install",
        "npm run dev",
        "```",
        "",
    ]
    return "\n".join(lines)


def deployable_pages(nodes: list[FlowNode]) -> list[FlowNode]:
    """Page nodes that have generated markup, in canvas order."""
    return [n for n in nodes if n.data.type == NodeType.PAGE and n.data.generated_code]


def generate_project_files(nodes: list[FlowNode], project_name: str) -> list[ProjectFile]:
    """Build the full file list for the deployed project.

    The first deployable page becomes the home route; later pages get a
    route per label, with numeric suffixes when labels collide.
    """
    package_json = {
        "name": sanitize_project_name(project_name),
        "version": "1.0.0",
        "private": True,
        "scripts": {
            "dev": "next dev",
            "build": "next build",
            "start": "next start",
            "lint": "next lint",
        },
        "dependencies": _PACKAGE_DEPENDENCIES,
        "devDependencies": {
            "eslint": "^8.57.0",
            "eslint-config-next": NEXT_VERSION,
        },
    }

    files = [
        ProjectFile(path="package.json", content=json.dumps(package_json, indent=2) + "\n"),
        ProjectFile(path="next.config.js", content=NEXT_CONFIG),
        ProjectFile(path="tailwind.config.js", content=TAILWIND_CONFIG),
        ProjectFile(path="postcss.config.js", content=POSTCSS_CONFIG),
        ProjectFile(path="tsconfig.json", content=json.dumps(_TSCONFIG, indent=2) + "\n"),
        ProjectFile(path=".gitignore", content=GITIGNORE),
        ProjectFile(path="app/globals.css", content=GLOBALS_CSS),
        ProjectFile(path="app/layout.tsx", content=_render_layout(project_name)),
    ]

    routes: list[str] = []
    pages = deployable_pages(nodes)
    if pages:
        home = pages[0]
        files.append(ProjectFile(path="app/page.tsx", content=_render_page("HomePage", home.data.generated_code)))
        routes.append("/")

        used_slugs: set[str] = set()
        used_names: set[str] = {"HomePage"}
        for node in pages[1:]:
            base_slug = page_slug(node.data.label)
            slug, n = base_slug, 2
            while slug in used_slugs:
                slug, n = f"{base_slug}-{n}", n + 1
            used_slugs.add(slug)

            base_name = component_name(node.data.label)
            name, n = base_name, 2
            while name in used_names:
                name, n = f"{base_name}{n}", n + 1
            used_names.add(name)

            files.append(ProjectFile(path=f"app/{slug}/page.tsx", content=_render_page(name, node.data.generated_code)))
            routes.append(f"/{slug}")

    schemas = [n.data.db_schema for n in nodes if n.data.type == NodeType.DATA and n.data.db_schema]
    has_auth = any(n.data.type == NodeType.AUTH for n in nodes)
    if schemas or has_auth:
        files.append(ProjectFile(path="lib/supabase.ts", content=SUPABASE_CLIENT))
    if schemas:
        sql = "\n\n".join(s.sql or render_create_table(s.table_name, s.fields) for s in schemas)
        files.append(ProjectFile(path="supabase/schema.sql", content=sql + "\n"))

    files.append(
        ProjectFile(
            path="README.md",
            content=_render_readme(project_name, routes, [s.table_name for s in schemas]),
        )
    )
    return files
