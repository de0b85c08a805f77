"""
In-page scripts evaluated by the element scanner.

Each script is a JavaScript function expression passed to Playwright's
``frame.evaluate``; it runs inside a single frame's document and returns only
JSON-serializable data.
"""

# Nodes a visual test author can target
INTERACTIVE_ELEMENT_QUERY = ', '.join(
	[
		'input',
		'button',
		'a',
		'select',
		'textarea',
		'[role="button"]',
		'[role="link"]',
		'[role="tab"]',
		'[data-testid]',
		'p',
		'h1',
		'h2',
		'h3',
		'h4',
		'h5',
		'h6',
		'div[id]',
		'span[id]',
	]
)

SKIPPED_TAGS = ('SCRIPT', 'STYLE', 'META', 'LINK', 'HEAD', 'TITLE')

SCAN_ELEMENTS_JS = """
({ query, skippedTags }) => {
	const skipped = new Set(skippedTags);

	const escapeId = (id) => (window.CSS && CSS.escape ? CSS.escape(id) : id);

	// Form elements shadow `id` with named controls, so read the attribute
	const idOf = (element) => element.getAttribute('id') || '';

	function xpathLiteral(value) {
		if (!value.includes('"')) return `"${value}"`;
		if (!value.includes("'")) return `'${value}'`;
		return 'concat(' + value.split('"').map((part) => `"${part}"`).join(`, '"', `) + ')';
	}

	function getXPath(element) {
		const id = idOf(element);
		if (id) return `//*[@id=${xpathLiteral(id)}]`;
		const steps = [];
		let current = element;
		while (current && current.nodeType === Node.ELEMENT_NODE) {
			let index = 1;
			let sibling = current.previousElementSibling;
			while (sibling) {
				if (sibling.nodeName === current.nodeName) index++;
				sibling = sibling.previousElementSibling;
			}
			steps.unshift(`${current.nodeName.toLowerCase()}[${index}]`);
			current = current.parentElement;
		}
		return '/' + steps.join('/');
	}

	function getCssSelector(element) {
		const steps = [];
		let current = element;
		while (current && current.nodeType === Node.ELEMENT_NODE) {
			const id = idOf(current);
			if (id) {
				steps.unshift('#' + escapeId(id));
				break;
			}
			let step = current.nodeName.toLowerCase();
			const parent = current.parentElement;
			if (parent) {
				let count = 0;
				let sibling = parent.firstElementChild;
				while (sibling) {
					if (sibling.nodeName === current.nodeName) {
						count++;
						if (sibling === current) {
							step += `:nth-of-type(${count})`;
							break;
						}
					}
					sibling = sibling.nextElementSibling;
				}
			}
			steps.unshift(step);
			current = parent;
		}
		return steps.join(' > ');
	}

	const results = [];
	for (const el of document.querySelectorAll(query)) {
		const tag = el.tagName.toUpperCase();
		if (skipped.has(tag)) continue;

		const rect = el.getBoundingClientRect();
		const attributes = {};
		for (const attr of Array.from(el.attributes)) {
			attributes[attr.name] = attr.value;
		}
		const text = el.textContent ? el.textContent.trim() : '';

		results.push({
			tag,
			id: idOf(el) || null,
			classes: Array.from(el.classList),
			text: text || null,
			attributes,
			xpath: getXPath(el),
			selector: getCssSelector(el),
			boundingBox: { x: rect.x, y: rect.y, width: rect.width, height: rect.height },
		});
	}
	return results;
}
"""

TAG_NAME_JS = 'el => el.tagName'
