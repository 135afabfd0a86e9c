# Provider clients: each exposes edit_image, ground_search and generate.
