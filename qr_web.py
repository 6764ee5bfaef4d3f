#!/usr/bin/env python3
"""
QR Codeword Correction Web App
Run: python3 qr_web.py [--port=8080]
Visit: http://<your-ip>:8080
"""

import sys
from flask import Flask, request, jsonify, render_template_string

from galois_field import FIELDS
from qr_decode import EC_LEVELS, correct_blocks, parse_hex
from reed_solomon import ReedSolomonDecoder
from rs_errors import UncorrectableDataError

app = Flask(__name__)

DECODERS = {name: ReedSolomonDecoder(field) for name, field in FIELDS.items()}

HTML = '''
<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>QR Codeword Correction</title>
    <style>
        body { font-family: -apple-system, sans-serif; background: #1a1a2e; color: #fff; padding: 20px; }
        .container { max-width: 600px; margin: 0 auto; }
        textarea { width: 100%; height: 120px; font-family: monospace; }
        #result { margin-top: 20px; padding: 15px; border-radius: 12px; display: none; white-space: pre-wrap; font-family: monospace; }
        #result.success { background: rgba(76, 175, 80, 0.3); }
        #result.error { background: rgba(244, 67, 54, 0.3); }
    </style>
</head>
<body>
    <div class="container">
        <h1>QR Codeword Correction</h1>
        <textarea id="codewords" placeholder="Codewords as hex, e.g. 10 20 0c 56 ..."></textarea>
        <p>
            Version <input id="version" type="number" min="1" max="40" value="1">
            Level <select id="level">{% for l in levels %}<option{% if l == 'M' %} selected{% endif %}>{{ l }}</option>{% endfor %}</select>
            <button onclick="decode()">Decode</button>
        </p>
        <div id="result"></div>
    </div>
    <script>
        function decode() {
            const result = document.getElementById('result');
            fetch('/decode', {
                method: 'POST',
                headers: {'Content-Type': 'application/json'},
                body: JSON.stringify({
                    codewords: document.getElementById('codewords').value,
                    version: parseInt(document.getElementById('version').value),
                    level: document.getElementById('level').value
                })
            })
                .then(r => r.json())
                .then(data => {
                    result.style.display = 'block';
                    if (data.success) {
                        result.className = 'success';
                        result.textContent = data.data.map(b => b.toString(16).padStart(2, '0')).join(' ');
                    } else {
                        result.className = 'error';
                        result.textContent = 'Error: ' + (data.error || data.blocks.map(b => b.status).join('\\n'));
                    }
                })
                .catch(err => {
                    result.style.display = 'block';
                    result.className = 'error';
                    result.textContent = 'Network error: ' + err.message;
                });
        }
    </script>
</body>
</html>
'''


def _codewords_from(payload):
    codewords = payload['codewords']
    if isinstance(codewords, str):
        return parse_hex(codewords)
    if not isinstance(codewords, list) or not all(isinstance(c, int) for c in codewords):
        raise ValueError("codewords must be a hex string or a list of integers")
    return codewords


@app.route('/')
def index():
    return render_template_string(HTML, levels=EC_LEVELS)


@app.route('/correct', methods=['POST'])
def correct():
    payload = request.get_json(silent=True) or {}
    try:
        codewords = _codewords_from(payload)
        ec_count = int(payload['ec_count'])
        decoder = DECODERS[payload.get('field', 'qr')]
        errors = decoder.decode(codewords, ec_count)
    except UncorrectableDataError as e:
        print(f"[CORRECT] Uncorrectable: {e}", flush=True)
        return jsonify({'success': False, 'error': str(e)}), 422
    except (KeyError, TypeError, ValueError) as e:
        print(f"[CORRECT] Bad request: {e}", flush=True)
        return jsonify({'success': False, 'error': f"Bad request: {e}"}), 400

    print(f"[CORRECT] {len(codewords)} codewords, {errors} corrected", flush=True)
    return jsonify({'success': True, 'codewords': codewords, 'errors': errors})


@app.route('/decode', methods=['POST'])
def decode():
    payload = request.get_json(silent=True) or {}
    try:
        codewords = _codewords_from(payload)
        data, rs_info = correct_blocks(codewords, int(payload.get('version', 1)), payload.get('level', 'M'))
    except (KeyError, TypeError, ValueError) as e:
        print(f"[DECODE] Bad request: {e}", flush=True)
        return jsonify({'success': False, 'error': f"Bad request: {e}"}), 400

    ok = all(info['status'] == 'ok' for info in rs_info)
    print(f"[DECODE] {len(rs_info)} block(s), {'ok' if ok else 'failed'}", flush=True)
    return jsonify({'success': ok, 'data': data, 'blocks': rs_info})


if __name__ == '__main__':
    import socket

    flags = dict(a[2:].split('=', 1) for a in sys.argv[1:] if a.startswith('--') and '=' in a)
    port = int(flags.get('port', 8080))

    # Get local IP
    s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        s.connect(('8.8.8.8', 80))
        ip = s.getsockname()[0]
    except OSError:
        ip = '127.0.0.1'
    finally:
        s.close()

    print("=" * 50)
    print("QR Codeword Correction Web App")
    print("=" * 50)
    print(f"\nVisit: http://{ip}:{port}")
    print(f"Or on this computer: http://localhost:{port}")
    print("\nPress Ctrl+C to stop\n")

    app.run(host='0.0.0.0', port=port, debug=False)
