"""Template sources for the generated website.

Template names end in their output extension so ``select_autoescape`` turns
HTML escaping on for pages and leaves the script alone.
"""

from __future__ import annotations

LEAFLET_CSS = "https://unpkg.com/leaflet@1.9.4/dist/leaflet.css"
LEAFLET_JS = "https://unpkg.com/leaflet@1.9.4/dist/leaflet.js"


LAYOUT_TEMPLATE = """{% import "macros.html" as ui %}
<!DOCTYPE html>
<html lang="ro">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{{ page_title }}</title>
{% if has_map %}
    <link rel="stylesheet" href="{{ leaflet_css }}" />
{% endif %}
    <link rel="stylesheet" href="styles.css">
</head>
<body class="page-{{ page_kind }}">
{% if header %}
{{ ui.header(header, link_prefix) }}
{% endif %}
{% block content %}{% endblock %}
{% if footer %}
{{ ui.footer(footer) }}
{% endif %}
{% if has_map %}
    <script src="{{ leaflet_js }}"></script>
{% endif %}
    <script src="script.js"></script>
</body>
</html>
"""


MACROS_TEMPLATE = """{% macro header(view, link_prefix) %}
    <header class="header {{ view.alignment }}">
        <h1>{{ view.title }}</h1>
        <p class="header-subtitle">{{ view.subtitle }}</p>
{% if view.nav or link_prefix %}
        <nav>
{% if link_prefix %}
            <a href="{{ link_prefix }}">Acasă</a>
{% endif %}
{% for link in view.nav %}
            <a href="{{ link_prefix }}#{{ link.anchor }}">{{ link.text }}</a>
{% endfor %}
        </nav>
{% endif %}
    </header>
{% endmacro %}

{% macro footer(view) %}
    <footer class="footer {{ view.alignment }}">
        <p>{{ view.body }}</p>
    </footer>
{% endmacro %}

{% macro teaser(card) %}
        <article class="blog-post" data-post-id="{{ card.id }}" data-date="{{ card.iso_date }}" data-title="{{ card.title }}" data-description="{{ card.description }}" data-content="{{ card.content }}">
            <div class="blog-post-date">{{ card.date }}</div>
            <h3>{{ card.title }}</h3>
            <p class="blog-post-description">{{ card.description }}</p>
            <p class="blog-post-content">{{ card.preview }}</p>
            <a class="blog-post-link" href="post.html?id={{ card.id | urlencode }}">Citește mai mult</a>
        </article>
{% endmacro %}
"""


INDEX_TEMPLATE = """{% extends "layout.html" %}
{% block content %}
{% for view in sections %}
{% if view.type == "hero" %}
    <section class="hero {{ view.alignment }}">
        <h1>{{ view.title }}</h1>
        <p>{{ view.subtitle }}</p>
    </section>
{% elif view.type in ("about", "services", "contact") %}
    <section class="{{ view.type }} {{ view.alignment }}"{% if view.anchor %} id="{{ view.anchor }}"{% endif %}>
        <h2>{{ view.title }}</h2>
        <p>{{ view.body }}</p>
    </section>
{% elif view.type == "blog" %}
    <section class="blog {{ view.alignment }}" id="{{ view.anchor }}">
        <h2>{{ view.title }}</h2>
        <div class="blog-posts" id="blog-posts-container">
            <p class="loading">Se încarcă postările...</p>
        </div>
        <p class="blog-more"><a class="btn-blog-all" href="blog.html">Vezi toate noutățile</a></p>
    </section>
{% elif view.type == "map" %}
    <section class="map {{ view.alignment }}" id="{{ view.anchor }}">
        <h2>{{ view.title }}</h2>
        <div id="map" class="map-container" style="width: 100%; height: 400px; border-radius: 8px;"></div>
    </section>
{% endif %}
{% endfor %}
{% endblock %}
"""


BLOG_TEMPLATE = """{% extends "layout.html" %}
{% import "macros.html" as ui %}
{% block content %}
    <main class="blog-page">
        <section class="blog-listing {{ blog.alignment }}">
            <h2>{{ blog.title }}</h2>
            <div class="blog-search">
                <input type="search" id="blog-search" placeholder="Caută în postări..." aria-label="Caută în postări">
            </div>
            <div class="blog-posts" id="blog-posts-grid">
{% for card in cards %}
{{ ui.teaser(card) }}
{% else %}
                <p class="blog-empty">Nu există postări încă.</p>
{% endfor %}
            </div>
            <div class="pagination" id="blog-pagination"></div>
        </section>
    </main>
{% endblock %}
"""


POST_TEMPLATE = """{% extends "layout.html" %}
{% block content %}
    <main class="post-page">
        <a class="post-back" href="blog.html">&larr; Înapoi la noutăți</a>
        <p class="post-loading" id="post-loading">Se încarcă postarea...</p>
        <article class="post" id="post-article" hidden>
            <div class="post-date"></div>
            <h2 class="post-title"></h2>
            <p class="post-description"></p>
            <div class="post-content"></div>
        </article>
        <p class="post-missing" id="post-missing" hidden>Postarea nu a fost găsită.</p>
{% for card in cards %}
        <template class="post-snapshot" data-post-id="{{ card.id }}" data-date="{{ card.iso_date }}" data-title="{{ card.title }}" data-description="{{ card.description }}">{{ card.content | safe }}</template>
{% endfor %}
    </main>
{% endblock %}
"""


SCRIPT_TEMPLATE = """// Configuration
const API_URL = {{ api_url | tojson }};
const SETTLEMENT_ID = {{ settlement_id | tojson }};
const SETTLEMENT_NAME = {{ settlement_name | tojson }};
const SETTLEMENT_REGION = {{ region | tojson }};
const LOCATION = { lat: {{ lat | tojson }}, lng: {{ lng | tojson }} };
{% if has_blog %}
const PAGE_SIZE = {{ page_size }};
const TEASER_COUNT = {{ teaser_count }};
const TEASER_LENGTH = {{ teaser_length }};
{% endif %}
{% if has_map %}
const MAP_RETRY_LIMIT = {{ map_retry_limit }};
const MAP_RETRY_DELAY = {{ map_retry_delay }};
{% endif %}

function escapeHtml(value) {
    return String(value == null ? '' : value)
        .replace(/&/g, '&amp;')
        .replace(/</g, '&lt;')
        .replace(/>/g, '&gt;')
        .replace(/"/g, '&quot;')
        .replace(/'/g, '&#39;');
}

// Smooth scroll for navigation links
function initSmoothScroll() {
    const navLinks = document.querySelectorAll('nav a[href^="#"]');

    navLinks.forEach(function(link) {
        link.addEventListener('click', function(e) {
            const targetId = this.getAttribute('href').substring(1);
            const targetElement = document.getElementById(targetId);

            if (targetElement) {
                e.preventDefault();
                targetElement.scrollIntoView({
                    behavior: 'smooth',
                    block: 'start'
                });
            }
        });
    });
}

// Fade sections in as they scroll into view
function initScrollAnimations() {
    const sections = document.querySelectorAll('section');

    if (!('IntersectionObserver' in window)) {
        return;
    }

    const observer = new IntersectionObserver(function(entries) {
        entries.forEach(function(entry) {
            if (entry.isIntersecting) {
                entry.target.style.opacity = '1';
                entry.target.style.transform = 'translateY(0)';
                observer.unobserve(entry.target);
            }
        });
    }, {
        threshold: 0.1,
        rootMargin: '0px 0px -50px 0px'
    });

    sections.forEach(function(section) {
        section.style.opacity = '0';
        section.style.transform = 'translateY(20px)';
        section.style.transition = 'opacity 0.6s ease, transform 0.6s ease';
        observer.observe(section);
    });
}
{% if has_blog %}

function truncate(text, limit) {
    const value = String(text == null ? '' : text);
    return value.length > limit ? value.slice(0, limit).trimEnd() + '...' : value;
}

function formatDate(value) {
    const date = new Date(value);
    if (isNaN(date.getTime())) {
        return '';
    }
    return date.toLocaleDateString('ro-RO', {
        year: 'numeric',
        month: 'long',
        day: 'numeric'
    });
}

function sortNewestFirst(posts) {
    return posts.slice().sort(function(a, b) {
        return new Date(b.date) - new Date(a.date);
    });
}

function renderTeaser(post) {
    const postId = post._id || post.id || '';
    return `
        <article class="blog-post">
            <div class="blog-post-date">${escapeHtml(formatDate(post.date))}</div>
            <h3>${escapeHtml(post.title)}</h3>
            <p class="blog-post-description">${escapeHtml(post.description)}</p>
            <p class="blog-post-content">${escapeHtml(truncate(post.content, TEASER_LENGTH))}</p>
            <a class="blog-post-link" href="post.html?id=${encodeURIComponent(postId)}">Citește mai mult</a>
        </article>`;
}

async function fetchPosts() {
    const response = await fetch(`${API_URL}/blog-posts?settlement=${encodeURIComponent(SETTLEMENT_ID)}`);
    if (!response.ok) {
        throw new Error('HTTP ' + response.status);
    }
    const payload = await response.json();
    const posts = payload && payload.data && payload.data.data;
    if (!Array.isArray(posts)) {
        throw new Error('Unexpected response shape');
    }
    return sortNewestFirst(posts);
}

// Index page: the newest posts only
async function loadBlogTeasers(container) {
    try {
        const posts = await fetchPosts();

        if (posts.length === 0) {
            container.innerHTML = '<p class="blog-empty">Nu există postări încă.</p>';
            return;
        }

        container.innerHTML = posts.slice(0, TEASER_COUNT).map(renderTeaser).join('');
    } catch (error) {
        console.error('Error loading blog posts:', error);
        container.innerHTML = '<p class="blog-error">Eroare la încărcarea postărilor.</p>';
    }
}

// Blog page: search and pagination over every post
const blogState = {
    allPosts: [],
    filteredPosts: [],
    currentPage: 1
};

function readSnapshotPosts(grid) {
    return Array.prototype.map.call(grid.querySelectorAll('.blog-post'), function(card) {
        return {
            _id: card.dataset.postId,
            date: card.dataset.date,
            title: card.dataset.title,
            description: card.dataset.description,
            content: card.dataset.content
        };
    });
}

function pageCount() {
    return Math.max(1, Math.ceil(blogState.filteredPosts.length / PAGE_SIZE));
}

function applySearch(query) {
    const needle = String(query || '').trim().toLowerCase();

    blogState.filteredPosts = needle
        ? blogState.allPosts.filter(function(post) {
            return [post.title, post.description, post.content].some(function(field) {
                return String(field == null ? '' : field).toLowerCase().includes(needle);
            });
        })
        : blogState.allPosts.slice();
    blogState.currentPage = 1;
    renderBlogPage();
}

function goToPage(page) {
    blogState.currentPage = Math.min(Math.max(1, page), pageCount());
    renderBlogPage();
}

function renderBlogPage() {
    const grid = document.getElementById('blog-posts-grid');
    const start = (blogState.currentPage - 1) * PAGE_SIZE;
    const visible = blogState.filteredPosts.slice(start, start + PAGE_SIZE);

    grid.innerHTML = visible.length
        ? visible.map(renderTeaser).join('')
        : '<p class="blog-empty">Nicio postare găsită.</p>';
    renderPagination();
}

function renderPagination() {
    const controls = document.getElementById('blog-pagination');
    if (!controls) {
        return;
    }

    const total = pageCount();
    const current = blogState.currentPage;
    const numbered = Math.ceil(blogState.filteredPosts.length / PAGE_SIZE);
    let markup = `<button type="button" class="page-btn page-prev" data-page="${current - 1}"${current === 1 ? ' disabled' : ''}>&lsaquo; Înapoi</button>`;

    for (let page = 1; page <= numbered; page++) {
        markup += `<button type="button" class="page-btn page-number${page === current ? ' active' : ''}" data-page="${page}">${page}</button>`;
    }

    markup += `<button type="button" class="page-btn page-next" data-page="${current + 1}"${current === total ? ' disabled' : ''}>Înainte &rsaquo;</button>`;
    controls.innerHTML = markup;
}

async function initBlogPage(grid) {
    const snapshot = readSnapshotPosts(grid);
    const search = document.getElementById('blog-search');
    const controls = document.getElementById('blog-pagination');

    try {
        blogState.allPosts = await fetchPosts();
    } catch (error) {
        console.error('Error loading blog posts, showing the published copy:', error);
        blogState.allPosts = snapshot;
    }

    if (controls) {
        controls.addEventListener('click', function(e) {
            const button = e.target.closest('button[data-page]');
            if (!button || button.disabled) {
                return;
            }
            goToPage(Number(button.dataset.page));
            grid.scrollIntoView({ behavior: 'smooth', block: 'start' });
        });
    }

    if (search) {
        search.addEventListener('input', function() {
            applySearch(search.value);
        });
    }

    applySearch(search ? search.value : '');
}

// Post page: the live post named in ?id=, the published copy when offline
async function fetchPost(postId) {
    const response = await fetch(`${API_URL}/blog-posts/${encodeURIComponent(postId)}`);
    if (response.status === 404) {
        return null;
    }
    if (!response.ok) {
        throw new Error('HTTP ' + response.status);
    }
    const payload = await response.json();
    const post = payload && payload.data && payload.data.data;
    if (!post || typeof post !== 'object') {
        throw new Error('Unexpected response shape');
    }
    return post;
}

function readSnapshotPost(postId) {
    const snapshots = document.querySelectorAll('template.post-snapshot');
    for (let i = 0; i < snapshots.length; i++) {
        if (snapshots[i].dataset.postId === postId) {
            return {
                _id: postId,
                date: snapshots[i].dataset.date,
                title: snapshots[i].dataset.title,
                description: snapshots[i].dataset.description,
                content: snapshots[i].innerHTML
            };
        }
    }
    return null;
}

function showPost(article, post) {
    article.querySelector('.post-date').textContent = formatDate(post.date);
    article.querySelector('.post-title').textContent = post.title || '';
    article.querySelector('.post-description').textContent = post.description || '';
    article.querySelector('.post-content').innerHTML = post.content || '';
    article.hidden = false;
    document.title = (post.title || '') + ' - ' + SETTLEMENT_NAME;
}

async function initPostPage(article) {
    const postId = new URLSearchParams(window.location.search).get('id');
    const loading = document.getElementById('post-loading');
    const missing = document.getElementById('post-missing');
    let post = null;

    if (postId) {
        try {
            post = await fetchPost(postId);
        } catch (error) {
            console.error('Error loading the post, showing the published copy:', error);
            post = readSnapshotPost(postId);
        }
    }

    if (loading) {
        loading.hidden = true;
    }
    if (post) {
        showPost(article, post);
    } else if (missing) {
        missing.hidden = false;
    }
}
{% endif %}
{% if has_map %}

// Leaflet may still be loading; retry a bounded number of times
let mapInstance = null;

function initMap(attempt) {
    const container = document.getElementById('map');

    if (!container || mapInstance || container.dataset.initialized === 'true') {
        return;
    }

    if (typeof L === 'undefined') {
        if (attempt < MAP_RETRY_LIMIT) {
            setTimeout(function() {
                initMap(attempt + 1);
            }, MAP_RETRY_DELAY);
        } else {
            console.error('Leaflet did not load, map disabled');
            container.innerHTML = '<p class="map-error">Harta nu a putut fi încărcată.</p>';
        }
        return;
    }

    container.dataset.initialized = 'true';
    mapInstance = L.map(container).setView([LOCATION.lat, LOCATION.lng], 13);

    L.tileLayer('https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png', {
        attribution: '&copy; OpenStreetMap contributors',
        maxZoom: 19
    }).addTo(mapInstance);

    L.marker([LOCATION.lat, LOCATION.lng])
        .addTo(mapInstance)
        .bindPopup('<b>' + escapeHtml(SETTLEMENT_NAME) + '</b><br>' + escapeHtml(SETTLEMENT_REGION))
        .openPopup();
}
{% endif %}

document.addEventListener('DOMContentLoaded', function() {
    initSmoothScroll();
    initScrollAnimations();
{% if has_blog %}

    const teaserContainer = document.getElementById('blog-posts-container');
    if (teaserContainer) {
        loadBlogTeasers(teaserContainer);
    }

    const blogGrid = document.getElementById('blog-posts-grid');
    if (blogGrid) {
        initBlogPage(blogGrid);
    }

    const postArticle = document.getElementById('post-article');
    if (postArticle) {
        initPostPage(postArticle);
    }
{% endif %}
{% if has_map %}

    initMap(0);
{% endif %}
});
"""


BASE_CSS = """/* Reset */
* {
    margin: 0;
    padding: 0;
    box-sizing: border-box;
}

body {
    font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, "Helvetica Neue", Arial, sans-serif;
    line-height: 1.6;
    color: #333;
}

/* Alignment classes */
.left {
    text-align: left;
}

.center {
    text-align: center;
}

.right {
    text-align: right;
}

/* Header */
.header {
    background: #10b981;
    color: white;
    padding: 20px;
}

.header h1 {
    margin-bottom: 4px;
}

.header-subtitle {
    opacity: 0.85;
    font-size: 14px;
}

.header nav {
    margin-top: 10px;
}

.header nav a {
    color: white;
    text-decoration: none;
    margin: 0 10px;
    padding: 5px 10px;
    border-radius: 4px;
    transition: background 0.3s;
}

.header nav a:hover {
    background: #059669;
}

/* Hero Section */
.hero {
    background: linear-gradient(135deg, #10b981 0%, #047857 100%);
    color: white;
    padding: 60px 20px;
}

.hero h1 {
    font-size: 48px;
    margin-bottom: 16px;
}

.hero p {
    font-size: 20px;
    opacity: 0.9;
}

/* About, Services, Contact, Blog, Map Sections */
.about, .services, .contact, .blog, .map, .blog-listing {
    padding: 60px 20px;
    max-width: 1200px;
    margin: 0 auto;
}

.about h2, .services h2, .contact h2, .blog h2, .map h2, .blog-listing h2 {
    font-size: 32px;
    margin-bottom: 16px;
    color: #10b981;
}

.about p, .services p, .contact p {
    font-size: 16px;
    line-height: 1.8;
    color: #666;
}

/* Blog Section */
.blog-posts {
    display: grid;
    grid-template-columns: repeat(auto-fill, minmax(300px, 1fr));
    gap: 24px;
    margin-top: 32px;
    text-align: left;
}

.blog-post {
    background: white;
    border-radius: 12px;
    padding: 24px;
    box-shadow: 0 2px 8px rgba(0, 0, 0, 0.1);
    transition: transform 0.3s ease, box-shadow 0.3s ease;
}

.blog-post:hover {
    transform: translateY(-4px);
    box-shadow: 0 4px 16px rgba(0, 0, 0, 0.15);
}

.blog-post-date {
    font-size: 14px;
    color: #6b7280;
    margin-bottom: 8px;
}

.blog-post h3 {
    font-size: 20px;
    margin-bottom: 8px;
    color: #1f2937;
}

.blog-post-description {
    font-size: 14px;
    color: #4b5563;
    margin-bottom: 12px;
}

.blog-post-content {
    font-size: 15px;
    line-height: 1.7;
    color: #374151;
}

.blog-post-link {
    display: inline-block;
    margin-top: 12px;
    color: #10b981;
    font-weight: 600;
    text-decoration: none;
}

.blog-more {
    margin-top: 24px;
}

.btn-blog-all {
    display: inline-block;
    padding: 10px 20px;
    border-radius: 6px;
    background: #10b981;
    color: white;
    text-decoration: none;
}

.loading, .blog-empty, .blog-error {
    grid-column: 1 / -1;
    text-align: center;
    color: #6b7280;
}

.blog-error {
    color: #ef4444;
}

/* Blog page */
.blog-search input {
    width: 100%;
    max-width: 480px;
    padding: 10px 14px;
    border: 2px solid #e5e7eb;
    border-radius: 8px;
    font-size: 16px;
}

.pagination {
    display: flex;
    flex-wrap: wrap;
    justify-content: center;
    gap: 8px;
    margin-top: 32px;
}

.page-btn {
    min-width: 40px;
    padding: 8px 12px;
    border: 1px solid #d1d5db;
    border-radius: 6px;
    background: white;
    cursor: pointer;
}

.page-btn.active {
    background: #10b981;
    border-color: #10b981;
    color: white;
}

.page-btn:disabled {
    opacity: 0.5;
    cursor: default;
}

/* Post page */
.post-page {
    max-width: 800px;
    margin: 0 auto;
    padding: 40px 20px;
}

.post-back {
    color: #10b981;
    text-decoration: none;
}

.post h2 {
    font-size: 36px;
    margin: 16px 0 8px;
}

.post-date {
    margin-top: 24px;
    color: #6b7280;
}

.post-description {
    font-size: 18px;
    color: #4b5563;
    margin-bottom: 24px;
}

.post-content {
    font-size: 17px;
    line-height: 1.8;
}

.post-loading,
.post-missing {
    margin-top: 24px;
    color: #6b7280;
}

/* Map Section */
#map {
    border: 2px solid #e5e7eb;
    box-shadow: 0 4px 12px rgba(0, 0, 0, 0.1);
}

.map-error {
    padding: 40px;
    color: #6b7280;
}

/* Footer */
.footer {
    background: #1a1a2e;
    color: white;
    padding: 20px;
    margin-top: 40px;
}

.footer p {
    opacity: 0.8;
}

/* Responsive */
@media (max-width: 768px) {
    .hero h1 {
        font-size: 32px;
    }

    .about, .services, .contact, .blog, .map, .blog-listing {
        padding: 40px 20px;
    }

    .about h2, .services h2, .contact h2, .blog h2, .map h2, .blog-listing h2 {
        font-size: 24px;
    }

    .header nav a {
        display: inline-block;
        margin: 4px;
    }
}

@media (max-width: 480px) {
    .blog-posts {
        grid-template-columns: 1fr;
    }

    .post h2 {
        font-size: 28px;
    }
}
"""
